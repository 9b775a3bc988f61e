"""
Sandboxed, read-only virtual filesystem.

Path translation with escape prevention, per-directory ignore rules,
text classification, recursive search and archive assembly, all confined
to one configured root directory.
"""

from dirshell.filesystem.archive import (
    ArchiveBuilder,
    ArchiveItem,
    DownloadKind,
    DownloadPlan,
)
from dirshell.filesystem.classifier import file_looks_text, looks_text
from dirshell.filesystem.completion import CompletionItem, PathCompleter
from dirshell.filesystem.config import SandboxConfig
from dirshell.filesystem.docs import read_doc_file
from dirshell.filesystem.exceptions import (
    BinaryContentError,
    CommandNotFoundError,
    EntryNotFoundError,
    FileAccessDeniedError,
    FileSizeLimitExceededError,
    FileSystemError,
    InvalidArgumentError,
    IsADirectoryPathError,
    NoMatchError,
    NotADirectoryPathError,
)
from dirshell.filesystem.ignore import IgnoreMatcher, parse_rule_file
from dirshell.filesystem.patterns import glob_match, has_glob_meta
from dirshell.filesystem.sandbox import (
    FileEntry,
    PathSandbox,
    join_virtual,
    normalize_virtual,
    url_escape_virtual,
)
from dirshell.filesystem.search import (
    GrepFailure,
    GrepMatch,
    SearchEngine,
    TreeResult,
    render_tree,
)
from dirshell.filesystem.walker import DirectoryWalker, Order, Visit, WalkEntry, WalkPolicy

__all__ = [
    "SandboxConfig",
    # Errors
    "FileSystemError",
    "FileAccessDeniedError",
    "EntryNotFoundError",
    "NotADirectoryPathError",
    "IsADirectoryPathError",
    "FileSizeLimitExceededError",
    "BinaryContentError",
    "InvalidArgumentError",
    "NoMatchError",
    "CommandNotFoundError",
    # Paths
    "PathSandbox",
    "FileEntry",
    "normalize_virtual",
    "join_virtual",
    "url_escape_virtual",
    "glob_match",
    "has_glob_meta",
    # Ignore rules
    "IgnoreMatcher",
    "parse_rule_file",
    # Classification
    "looks_text",
    "file_looks_text",
    # Traversal and search
    "DirectoryWalker",
    "WalkPolicy",
    "WalkEntry",
    "Visit",
    "Order",
    "SearchEngine",
    "GrepMatch",
    "GrepFailure",
    "TreeResult",
    "render_tree",
    # Archives
    "ArchiveBuilder",
    "ArchiveItem",
    "DownloadKind",
    "DownloadPlan",
    # Directory extras
    "read_doc_file",
    "PathCompleter",
    "CompletionItem",
]
