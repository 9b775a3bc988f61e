"""
Collection of download targets and streaming zip assembly.
"""

import enum
import logging
import mimetypes
import posixpath
import shutil
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from dirshell.filesystem.exceptions import InvalidArgumentError, NoMatchError
from dirshell.filesystem.ignore import IgnoreMatcher
from dirshell.filesystem.patterns import glob_match, has_glob_meta
from dirshell.filesystem.sandbox import PathSandbox, join_virtual, normalize_virtual
from dirshell.filesystem.walker import DirectoryWalker, Visit, WalkEntry, WalkPolicy

logger = logging.getLogger(__name__)

MULTI_FILE_ARCHIVE_NAME = "archive.zip"

_COPY_CHUNK = 64 * 1024


@dataclass(frozen=True)
class ArchiveItem:
    """A source file and its name inside the archive."""

    source: Path
    arcname: str
    virtual_path: str


class DownloadKind(str, enum.Enum):
    FILE = "file"
    ZIP = "zip"


@dataclass
class DownloadPlan:
    """What a download request resolves to."""

    kind: DownloadKind
    filename: str
    content_type: str
    path: Optional[Path] = None
    items: list[ArchiveItem] = field(default_factory=list)


class _ChunkSink:
    """Write-only stream collecting bytes for iter_zip."""

    def __init__(self):
        self._chunks: list[bytes] = []

    def write(self, data) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class ArchiveBuilder:
    """
    Resolves download targets to file sets and writes them as zip archives.

    Usage:
        builder = ArchiveBuilder(sandbox, matcher)
        items = builder.collect_for_download("/docs", "*.md")
        with open("out.zip", "wb") as f:
            builder.write_zip(items, f)
    """

    def __init__(
        self,
        sandbox: PathSandbox,
        ignore: IgnoreMatcher,
        walker: Optional[DirectoryWalker] = None,
    ):
        self.sandbox = sandbox
        self.ignore = ignore
        self.walker = walker or DirectoryWalker(ignore)

    def collect_for_download(self, cwd: str, pattern: str) -> list[ArchiveItem]:
        """
        Resolve a download target relative to cwd.

        - `.` collects cwd recursively.
        - A glob matches files in one directory (the pattern's directory
          part, or cwd), not recursively.
        - Anything else is a literal name: a directory is collected
          recursively, a file is returned as the only item.

        Raises:
            FileAccessDeniedError: If the target escapes the root
            EntryNotFoundError: If a literal target or glob directory is missing
                or a directory target is ignored
        """
        if pattern == ".":
            return self.collect_from_directory(cwd)

        if has_glob_meta(pattern):
            return self._collect_glob(cwd, pattern)

        entry = self.sandbox.stat(join_virtual(cwd, pattern))
        if entry.is_directory:
            return self.collect_from_directory(entry.virtual_path)
        return [ArchiveItem(entry.real_path, entry.real_path.name, entry.virtual_path)]

    def _collect_glob(self, cwd: str, pattern: str) -> list[ArchiveItem]:
        directory, file_pattern = posixpath.split(pattern)
        virtual_dir = join_virtual(cwd, directory) if directory else normalize_virtual(cwd)
        root = self.ignore.require_visible(self.sandbox.require_directory(virtual_dir))
        # dotfiles match only a pattern that starts with a dot, as in find
        policy = WalkPolicy(show_hidden=file_pattern.startswith("."), max_depth=1)

        def visit(entry: WalkEntry) -> Visit:
            if entry.is_dir or not glob_match(file_pattern, entry.name):
                return Visit.SKIP
            return Visit.INCLUDE

        items = [
            ArchiveItem(entry.real_path, entry.name, entry.virtual_path)
            for entry in self.walker.walk(root.real_path, root.virtual_path, policy, visit)
        ]
        logger.debug(f"Pattern {pattern!r} in {virtual_dir} matched {len(items)} files")
        return items

    def collect_from_directory(self, virtual_dir: str) -> list[ArchiveItem]:
        """
        Collect every visible, non-ignored file below a directory.

        Archive names are prefixed with the directory's base name.

        Raises:
            EntryNotFoundError: If the directory is missing or ignored
        """
        root = self.ignore.require_visible(self.sandbox.require_directory(virtual_dir))
        base = root.real_path.name

        def visit(entry: WalkEntry) -> Visit:
            return Visit.DESCEND if entry.is_dir else Visit.INCLUDE

        items = []
        for entry in self.walker.walk(root.real_path, root.virtual_path, WalkPolicy(), visit):
            rel = posixpath.relpath(entry.virtual_path, root.virtual_path)
            items.append(ArchiveItem(entry.real_path, posixpath.join(base, rel), entry.virtual_path))
        return items

    def write_zip(self, items: list[ArchiveItem], stream: BinaryIO) -> int:
        """
        Write items as a zip archive into stream.

        The stream does not need to be seekable. A file that cannot be
        opened or read is left out; the rest of the archive still completes.

        Returns:
            Number of entries written
        """
        return sum(1 for _ in self._write_entries(items, stream))

    def iter_zip(self, items: list[ArchiveItem]) -> Iterator[bytes]:
        """Yield the zip archive in chunks, one or more per entry."""
        sink = _ChunkSink()
        for _ in self._write_entries(items, sink):
            data = sink.drain()
            if data:
                yield data
        data = sink.drain()
        if data:
            yield data

    def _write_entries(self, items: list[ArchiveItem], stream) -> Iterator[ArchiveItem]:
        with zipfile.ZipFile(stream, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for item in items:
                try:
                    src = open(item.source, "rb")
                except OSError as e:
                    logger.debug(f"Skipping {item.source} in archive: {e}")
                    continue
                with src:
                    try:
                        info = zipfile.ZipInfo.from_file(item.source, item.arcname)
                        info.compress_type = zipfile.ZIP_DEFLATED
                        zip64 = info.file_size > zipfile.ZIP64_LIMIT
                        with zf.open(info, "w", force_zip64=zip64) as dst:
                            shutil.copyfileobj(src, dst, _COPY_CHUNK)
                    except OSError as e:
                        logger.debug(f"Failed to copy {item.source} into archive: {e}")
                        continue
                yield item

    def plan_download(
        self,
        cwd: str = "/",
        path: Optional[str] = None,
        directory: Optional[str] = None,
        pattern: Optional[str] = None,
    ) -> DownloadPlan:
        """
        Resolve the parameters of a raw download request.

        Mirrors the `path=`, `dir=` and `pattern=&cwd=` query shapes;
        exactly one of path, directory or pattern must be given. Errors carry the
        HTTP status the endpoint should answer with.

        Raises:
            InvalidArgumentError: If none or several parameters are given
            IsADirectoryPathError: If path names a directory
            NotADirectoryPathError: If directory names a file
            FileAccessDeniedError: If a target escapes the root
            EntryNotFoundError: If a target does not exist
            NoMatchError: If pattern matches no files
        """
        given = [value for value in (path, directory, pattern) if value]
        if not given:
            raise InvalidArgumentError("missing download parameters")
        if len(given) > 1:
            raise InvalidArgumentError("conflicting download parameters")

        if path:
            entry = self.sandbox.require_file(join_virtual(cwd, path))
            content_type = mimetypes.guess_type(entry.name)[0] or "application/octet-stream"
            return DownloadPlan(DownloadKind.FILE, entry.name, content_type, path=entry.real_path)

        if directory:
            root = self.sandbox.require_directory(directory)
            return DownloadPlan(
                DownloadKind.ZIP,
                f"{root.real_path.name}.zip",
                "application/zip",
                items=self.collect_from_directory(root.virtual_path),
            )

        items = self.collect_for_download(cwd, pattern)
        if not items:
            raise NoMatchError("no matching files found")
        return DownloadPlan(DownloadKind.ZIP, MULTI_FILE_ARCHIVE_NAME, "application/zip", items=items)
