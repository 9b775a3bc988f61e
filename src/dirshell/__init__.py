"""
dirshell - one directory tree behind a sandboxed, read-only shell.

This package provides the virtual-filesystem engine (path containment,
ignore rules, search, archives) and the shell-like command interpreter
that exposes it to remote clients.
"""

__version__ = "0.1.0"

from dirshell.filesystem import (
    ArchiveBuilder,
    FileSystemError,
    IgnoreMatcher,
    PathSandbox,
    SandboxConfig,
    SearchEngine,
)
from dirshell.shell import (
    CommandInterpreter,
    CommandResult,
    RequestInfo,
    Session,
    SessionStore,
)

__all__ = [
    "__version__",
    "SandboxConfig",
    "PathSandbox",
    "IgnoreMatcher",
    "SearchEngine",
    "ArchiveBuilder",
    "FileSystemError",
    "CommandInterpreter",
    "CommandResult",
    "RequestInfo",
    "Session",
    "SessionStore",
]
