"""
Translation of client-visible virtual paths into real paths under the root.
"""

import logging
import os
import posixpath
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from dirshell.filesystem.config import SandboxConfig
from dirshell.filesystem.exceptions import (
    EntryNotFoundError,
    FileAccessDeniedError,
    IsADirectoryPathError,
    NotADirectoryPathError,
)

logger = logging.getLogger(__name__)

_QUERY_ESCAPES = (
    ("%", "%25"),
    (" ", "%20"),
    ("#", "%23"),
    ("?", "%3F"),
    ("&", "%26"),
    ("+", "%2B"),
)


def normalize_virtual(path: str) -> str:
    """
    Return path rooted at `/` with `.` and `..` segments collapsed.

    `..` at the top is absorbed by `/`, so the result never climbs above
    the virtual root. Empty input maps to `/`.
    """
    if not path:
        return "/"
    normalized = posixpath.normpath("/" + path.lstrip("/"))
    # normpath keeps a leading "//" pair
    return "/" + normalized.lstrip("/")


def join_virtual(base: str, arg: str) -> str:
    """Join arg onto base; an absolute arg replaces base."""
    if not arg:
        return normalize_virtual(base)
    if arg.startswith("/"):
        return normalize_virtual(arg)
    return normalize_virtual(posixpath.join(base or "/", arg))


def query_escape(value: str) -> str:
    """Minimal escaping that keeps a value safe inside a query string."""
    for raw, escaped in _QUERY_ESCAPES:
        value = value.replace(raw, escaped)
    return value


def url_escape_virtual(path: str) -> str:
    """Escape each segment of a virtual path, keeping the slashes."""
    segments = normalize_virtual(path).lstrip("/").split("/")
    return "/" + "/".join(query_escape(s) for s in segments)


@dataclass(frozen=True)
class FileEntry:
    """A single filesystem entry, built from a fresh stat on every call."""

    virtual_path: str
    real_path: Path
    is_directory: bool
    size: int
    mode: int
    mod_time: datetime

    @property
    def name(self) -> str:
        return self.real_path.name

    @classmethod
    def from_stat(cls, virtual_path: str, real_path: Path, st: os.stat_result) -> "FileEntry":
        return cls(
            virtual_path=virtual_path,
            real_path=real_path,
            is_directory=stat.S_ISDIR(st.st_mode),
            size=st.st_size,
            mode=st.st_mode,
            mod_time=datetime.fromtimestamp(st.st_mtime),
        )


class PathSandbox:
    """
    Maps virtual paths onto the configured root and refuses escapes.

    The containment check runs after lexical `..` collapsing and compares
    the absolute candidate against the root via a relative path. Symlinks
    are only checked when `reject_symlink_escapes` is enabled.

    Usage:
        sandbox = PathSandbox(SandboxConfig(root="/srv/public"))
        real = sandbox.resolve("/docs/../README.md")  # /srv/public/README.md
    """

    def __init__(self, config: SandboxConfig):
        """
        Initialize the sandbox.

        Args:
            config: Sandbox configuration holding the root
        """
        self.config = config
        self.root = config.root
        self._root_str = str(config.root)
        self._real_root = os.path.realpath(self._root_str)

    def resolve(self, virtual_path: str) -> Path:
        """
        Translate a virtual path into a real path inside the root.

        Args:
            virtual_path: Client-visible path (absolute or not)

        Returns:
            Absolute real path, equal to or below the root

        Raises:
            FileAccessDeniedError: If the result would leave the root
        """
        v = normalize_virtual(virtual_path)
        if v == "/":
            return self.root

        candidate = os.path.abspath(os.path.join(self._root_str, *v.lstrip("/").split("/")))
        if not self._is_contained(candidate, self._root_str):
            logger.warning(f"Access denied to {virtual_path!r}: escapes root")
            raise FileAccessDeniedError(virtual_path)

        if self.config.reject_symlink_escapes:
            target = os.path.realpath(candidate)
            if not self._is_contained(target, self._real_root):
                logger.warning(f"Access denied to {virtual_path!r}: symlink leaves root")
                raise FileAccessDeniedError(virtual_path)

        return Path(candidate)

    @staticmethod
    def _is_contained(path: str, root: str) -> bool:
        if path == root:
            return True
        try:
            rel = os.path.relpath(path, root)
        except ValueError:
            return False
        return rel != ".." and not rel.startswith(".." + os.sep)

    def to_virtual(self, real_path: Path) -> str:
        """Map a real path under the root back to its virtual path."""
        rel = os.path.relpath(str(real_path), self._root_str)
        if rel == ".":
            return "/"
        return normalize_virtual(rel.replace(os.sep, "/"))

    def stat(self, virtual_path: str) -> FileEntry:
        """
        Resolve and stat a virtual path.

        Raises:
            FileAccessDeniedError: If the path escapes the root
            EntryNotFoundError: If nothing exists there
        """
        v = normalize_virtual(virtual_path)
        real = self.resolve(v)
        try:
            st = real.stat()
        except OSError:
            raise EntryNotFoundError(v)
        return FileEntry.from_stat(v, real, st)

    def require_directory(self, virtual_path: str) -> FileEntry:
        """Stat a path and require it to be a directory."""
        entry = self.stat(virtual_path)
        if not entry.is_directory:
            raise NotADirectoryPathError(entry.virtual_path)
        return entry

    def require_file(self, virtual_path: str) -> FileEntry:
        """Stat a path and require it not to be a directory."""
        entry = self.stat(virtual_path)
        if entry.is_directory:
            raise IsADirectoryPathError(entry.virtual_path)
        return entry
