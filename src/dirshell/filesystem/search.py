"""
Recursive search over the sandbox: find, grep and tree.

All three run on DirectoryWalker, so hidden-file and ignore-rule handling
is identical across them.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from dirshell.filesystem.classifier import looks_text
from dirshell.filesystem.config import SandboxConfig
from dirshell.filesystem.exceptions import (
    FileSizeLimitExceededError,
    FileSystemError,
    InvalidArgumentError,
)
from dirshell.filesystem.ignore import IgnoreMatcher
from dirshell.filesystem.patterns import glob_match
from dirshell.filesystem.sandbox import PathSandbox, join_virtual
from dirshell.filesystem.walker import (
    DirectoryWalker,
    Order,
    Visit,
    WalkEntry,
    WalkPolicy,
)

logger = logging.getLogger(__name__)

TYPE_FILTERS = ("f", "d")


@dataclass
class GrepMatch:
    """A matching line."""

    virtual_path: str
    line_number: int
    line: str
    spans: list[tuple[int, int]] = field(default_factory=list)
    with_filename: bool = False

    def __repr__(self) -> str:
        return f"{self.virtual_path}:{self.line_number}: {self.line}"


@dataclass
class GrepFailure:
    """A target that could not be searched."""

    target: str
    message: str


GrepItem = Union[GrepMatch, GrepFailure]


@dataclass
class TreeResult:
    """Entries of a tree walk plus directory and file counts."""

    entries: list[WalkEntry]
    directories: int
    files: int


def _find_spans(line: str, needle: str) -> list[tuple[int, int]]:
    spans = []
    start = line.find(needle)
    while start >= 0 and needle:
        end = start + len(needle)
        spans.append((start, end))
        start = line.find(needle, end)
    return spans


class SearchEngine:
    """
    find/grep/tree over virtual paths.

    Usage:
        engine = SearchEngine(sandbox, matcher)
        for entry in engine.find("/", name_pattern="*.txt"):
            print(entry.virtual_path)
    """

    def __init__(
        self,
        sandbox: PathSandbox,
        ignore: IgnoreMatcher,
        walker: Optional[DirectoryWalker] = None,
    ):
        self.sandbox = sandbox
        self.ignore = ignore
        self.config: SandboxConfig = sandbox.config
        self.walker = walker or DirectoryWalker(ignore)

    def find(
        self,
        virtual_dir: str,
        name_pattern: str = "*",
        type_filter: Optional[str] = None,
    ) -> list[WalkEntry]:
        """
        Recursively find entries whose base name matches name_pattern.

        Hidden entries are skipped unless the pattern itself starts with a
        dot. Ignored entries are always skipped.

        Args:
            virtual_dir: Directory to search from
            name_pattern: Glob matched against base names
            type_filter: "f" for files, "d" for directories, None for both

        Returns:
            Matching entries in walk order

        Raises:
            InvalidArgumentError: If type_filter is not "f" or "d"
            FileAccessDeniedError: If virtual_dir escapes the root
            EntryNotFoundError: If virtual_dir does not exist or is ignored
            NotADirectoryPathError: If virtual_dir is a file
        """
        if type_filter and type_filter not in TYPE_FILTERS:
            raise InvalidArgumentError(
                "invalid type filter (use 'f' for files or 'd' for directories)"
            )

        root = self.ignore.require_visible(self.sandbox.require_directory(virtual_dir))
        policy = WalkPolicy(show_hidden=name_pattern.startswith("."))

        def visit(entry: WalkEntry) -> Visit:
            if not glob_match(name_pattern, entry.name):
                return Visit.DESCEND
            if type_filter == "f" and entry.is_dir:
                return Visit.DESCEND
            if type_filter == "d" and not entry.is_dir:
                return Visit.DESCEND
            return Visit.INCLUDE_AND_DESCEND

        results = list(self.walker.walk(root.real_path, root.virtual_path, policy, visit))
        logger.info(f"find found {len(results)} entries under {root.virtual_path}")
        return results

    def grep_file(
        self,
        real_path: Path,
        virtual_path: str,
        pattern: str,
        ignore_case: bool = False,
        with_filename: bool = False,
    ) -> list[GrepMatch]:
        """
        Substring search within one file.

        Binary files (by a sniff of the first bytes) yield no matches.

        Raises:
            FileSizeLimitExceededError: If the file is above the grep cap
            OSError: If the file cannot be opened or read
        """
        results = []
        needle = pattern.lower() if ignore_case else pattern

        with open(real_path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            if size > self.config.grep_max_bytes:
                raise FileSizeLimitExceededError(virtual_path, size, self.config.grep_max_bytes)

            if not looks_text(f.read(self.config.sniff_bytes)):
                logger.debug(f"grep skipping binary file {real_path}")
                return results
            f.seek(0)

            for line_number, raw in enumerate(f, start=1):
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                haystack = line.lower() if ignore_case else line
                if needle not in haystack:
                    continue
                spans = _find_spans(haystack, needle)
                if ignore_case and len(haystack) != len(line):
                    # lowercasing changed offsets; report the line unmarked
                    spans = []
                results.append(
                    GrepMatch(
                        virtual_path=virtual_path,
                        line_number=line_number,
                        line=line,
                        spans=spans,
                        with_filename=with_filename,
                    )
                )
        return results

    def grep_directory(
        self,
        real_dir: Path,
        virtual_dir: str,
        pattern: str,
        ignore_case: bool = False,
    ) -> Iterator[GrepItem]:
        """Search every visible, non-ignored file below a directory."""

        def visit(entry: WalkEntry) -> Visit:
            return Visit.DESCEND if entry.is_dir else Visit.INCLUDE

        for entry in self.walker.walk(real_dir, virtual_dir, WalkPolicy(), visit):
            try:
                yield from self.grep_file(
                    entry.real_path, entry.virtual_path, pattern, ignore_case, True
                )
            except FileSizeLimitExceededError as e:
                yield GrepFailure(entry.virtual_path, str(e))
            except OSError as e:
                logger.debug(f"grep skipping {entry.real_path}: {e}")

    def grep(
        self,
        cwd: str,
        pattern: str,
        targets: list[str],
        recursive: bool = False,
        ignore_case: bool = False,
    ) -> list[GrepItem]:
        """
        Search targets (files, or directories with recursive) for pattern.

        A failing target is reported as a GrepFailure and the remaining
        targets are still searched.

        Args:
            cwd: Virtual directory relative targets are joined to
            pattern: Literal substring to look for
            targets: Files or directories as typed by the client
            recursive: Descend into directory targets
            ignore_case: Case-insensitive matching

        Returns:
            Matches and failures in target order
        """
        items: list[GrepItem] = []
        with_filename = len(targets) > 1

        for target in targets:
            try:
                entry = self.sandbox.stat(join_virtual(cwd, target))
            except FileSystemError as e:
                items.append(GrepFailure(target, str(e)))
                continue

            if entry.is_directory:
                if not recursive:
                    items.append(GrepFailure(target, "is a directory"))
                    continue
                if self.ignore.is_hidden(entry.real_path):
                    items.append(GrepFailure(target, "no such file or directory"))
                    continue
                items.extend(
                    self.grep_directory(entry.real_path, entry.virtual_path, pattern, ignore_case)
                )
                continue

            try:
                items.extend(
                    self.grep_file(
                        entry.real_path, entry.virtual_path, pattern, ignore_case, with_filename
                    )
                )
            except FileSizeLimitExceededError as e:
                items.append(GrepFailure(target, str(e)))
            except OSError as e:
                items.append(GrepFailure(target, e.strerror or str(e)))

        logger.info(f"grep {pattern!r} produced {len(items)} lines")
        return items

    def tree(
        self,
        virtual_dir: str,
        show_hidden: bool = False,
        max_depth: Optional[int] = None,
    ) -> TreeResult:
        """
        Walk a directory for tree rendering.

        Directories sort before files, then by name. Ignored entries are
        hidden.

        Raises:
            FileAccessDeniedError: If virtual_dir escapes the root
            EntryNotFoundError: If virtual_dir does not exist or is ignored
            NotADirectoryPathError: If virtual_dir is a file
        """
        root = self.ignore.require_visible(self.sandbox.require_directory(virtual_dir))
        policy = WalkPolicy(show_hidden=show_hidden, max_depth=max_depth, order=Order.DIRS_FIRST)
        entries = list(self.walker.walk(root.real_path, root.virtual_path, policy))
        directories = sum(1 for e in entries if e.is_dir)
        return TreeResult(entries=entries, directories=directories, files=len(entries) - directories)


def render_tree(result: TreeResult, label: Callable[[WalkEntry], str] = lambda e: e.name) -> str:
    """Render a TreeResult with box-drawing connectors and a summary line."""
    lines = []
    for entry in result.entries:
        prefix = "".join("    " if last else "│   " for last in entry.lineage)
        connector = "└── " if entry.is_last else "├── "
        lines.append(prefix + connector + label(entry))
    lines.append("")
    lines.append(f"{result.directories} directories, {result.files} files")
    return "\n".join(lines)
