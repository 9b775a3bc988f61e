"""
Per-directory ignore rules.

Every directory between an entry and the sandbox root may hold an ignore
file with one glob pattern per line. An entry matched by any of them is
hidden from listings, searches and archives.
"""

import logging
import os
from pathlib import Path
from typing import Union

from dirshell.filesystem.exceptions import EntryNotFoundError
from dirshell.filesystem.patterns import glob_match
from dirshell.filesystem.sandbox import FileEntry

logger = logging.getLogger(__name__)


def parse_rule_file(path: Union[str, Path]) -> list[str]:
    """
    Read glob patterns from an ignore file.

    Blank lines and lines starting with `#` are skipped. A missing file
    yields an empty list.

    Raises:
        OSError: If the file exists but cannot be read
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        return []

    patterns = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


class IgnoreMatcher:
    """
    Decides whether an entry is hidden by an ignore rule.

    Rules are re-read on every call, nearest directory first.

    Usage:
        matcher = IgnoreMatcher(Path("/srv/public"), ".dirshellignore")
        if matcher.should_ignore(path, path.name):
            ...
    """

    def __init__(self, root: Path, filename: str):
        self.root = str(root)
        self.filename = filename

    def _inside_root(self, directory: str) -> bool:
        if directory == self.root:
            return True
        rel = os.path.relpath(directory, self.root)
        return rel != ".." and not rel.startswith(".." + os.sep)

    def should_ignore(self, real_path: Union[str, Path], name: str) -> bool:
        """
        Check the ignore files from the entry's directory up to the root.

        At each level a pattern matches either the entry name or the entry's
        path relative to the directory holding the ignore file.

        Args:
            real_path: Real path of the candidate entry
            name: Base name of the candidate entry

        Returns:
            True if any rule hides the entry
        """
        real_path = str(real_path)
        current = os.path.dirname(real_path)

        while self._inside_root(current):
            rule_file = os.path.join(current, self.filename)
            try:
                patterns = parse_rule_file(rule_file)
            except OSError as e:
                logger.debug(f"Skipping unreadable ignore file {rule_file}: {e}")
                patterns = []

            if patterns:
                rel = os.path.relpath(real_path, current).replace(os.sep, "/")
                for pattern in patterns:
                    if glob_match(pattern, name) or glob_match(pattern, rel):
                        logger.debug(f"Ignoring {real_path} (rule {pattern!r} in {current})")
                        return True

            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent

        return False

    def is_hidden(self, real_path: Union[str, Path]) -> bool:
        """
        Check an entry and every ancestor below the root.

        An entry inside an ignored directory is hidden even though no rule
        names it directly.
        """
        current = os.path.abspath(str(real_path))
        while current != self.root and self._inside_root(current):
            if self.should_ignore(current, os.path.basename(current)):
                return True
            current = os.path.dirname(current)
        return False

    def require_visible(self, entry: FileEntry) -> FileEntry:
        """
        Reject an entry hidden by an ignore rule as if it did not exist.

        Raises:
            EntryNotFoundError: If the entry or one of its ancestors is ignored
        """
        if self.is_hidden(entry.real_path):
            logger.debug(f"Refusing hidden target {entry.virtual_path}")
            raise EntryNotFoundError(entry.virtual_path)
        return entry
