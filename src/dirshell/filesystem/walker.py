"""
The one recursive directory traversal shared by find, grep, tree and
archive collection.
"""

import enum
import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional

from dirshell.filesystem.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)


class Visit(enum.Flag):
    """Decision returned by a visit callback."""

    SKIP = 0
    INCLUDE = enum.auto()
    DESCEND = enum.auto()
    INCLUDE_AND_DESCEND = INCLUDE | DESCEND


class Order(str, enum.Enum):
    """Sibling ordering."""

    NAME = "name"
    DIRS_FIRST = "dirs_first"


@dataclass(frozen=True)
class WalkPolicy:
    """Filtering applied to every entry before the visit callback sees it."""

    show_hidden: bool = False
    respect_ignore: bool = True
    max_depth: Optional[int] = None
    order: Order = Order.NAME


@dataclass(frozen=True)
class WalkEntry:
    """An entry reached by the walker."""

    name: str
    real_path: Path
    virtual_path: str
    is_dir: bool
    depth: int
    is_last: bool
    lineage: tuple[bool, ...] = ()
    """`is_last` flags of every ancestor below the walk root."""

    def stat(self) -> os.stat_result:
        return self.real_path.stat()


VisitCallback = Callable[[WalkEntry], Visit]


def _include_all(entry: WalkEntry) -> Visit:
    return Visit.INCLUDE_AND_DESCEND


class DirectoryWalker:
    """
    Pre-order walker with hidden/ignore filtering and per-entry error
    tolerance.

    Entries the policy hides are neither visited nor descended into.
    Directories that cannot be listed are skipped; the walk continues with
    their siblings. Symlinked directories are reported but not descended.

    Usage:
        walker = DirectoryWalker(matcher)
        for entry in walker.walk(real_dir, "/docs", WalkPolicy(show_hidden=True)):
            print(entry.virtual_path)
    """

    def __init__(self, ignore: IgnoreMatcher):
        self.ignore = ignore

    def list_directory(self, real_dir: Path, policy: WalkPolicy) -> list[os.DirEntry]:
        """
        List one directory, filtered and sorted by policy.

        Raises:
            OSError: If the directory cannot be read
        """
        with os.scandir(real_dir) as it:
            entries = []
            for entry in it:
                if not policy.show_hidden and entry.name.startswith("."):
                    continue
                if policy.respect_ignore and self.ignore.should_ignore(entry.path, entry.name):
                    continue
                entries.append(entry)

        if policy.order == Order.DIRS_FIRST:
            entries.sort(key=lambda e: (not _is_dir(e), e.name))
        else:
            entries.sort(key=lambda e: e.name)
        return entries

    def walk(
        self,
        real_dir: Path,
        virtual_dir: str,
        policy: WalkPolicy = WalkPolicy(),
        visit: VisitCallback = _include_all,
    ) -> Iterator[WalkEntry]:
        """
        Yield included entries below real_dir in pre-order.

        Args:
            real_dir: Real directory to start from (not itself yielded)
            virtual_dir: Virtual path of real_dir
            policy: Hidden/ignore/depth/order policy
            visit: Callback deciding inclusion and descent per entry

        Yields:
            WalkEntry for every entry the callback includes
        """
        yield from self._walk(Path(real_dir), virtual_dir, policy, visit, 0, ())

    def _walk(
        self,
        real_dir: Path,
        virtual_dir: str,
        policy: WalkPolicy,
        visit: VisitCallback,
        depth: int,
        lineage: tuple[bool, ...],
    ) -> Iterator[WalkEntry]:
        if policy.max_depth is not None and depth >= policy.max_depth:
            return

        try:
            entries = self.list_directory(real_dir, policy)
        except OSError as e:
            logger.debug(f"Skipping unreadable directory {real_dir}: {e}")
            return

        for index, entry in enumerate(entries):
            is_last = index == len(entries) - 1
            walk_entry = WalkEntry(
                name=entry.name,
                real_path=Path(entry.path),
                virtual_path=posixpath.join(virtual_dir, entry.name),
                is_dir=_is_dir(entry),
                depth=depth,
                is_last=is_last,
                lineage=lineage,
            )
            decision = visit(walk_entry)
            if Visit.INCLUDE in decision:
                yield walk_entry
            if Visit.DESCEND in decision and walk_entry.is_dir and not entry.is_symlink():
                yield from self._walk(
                    walk_entry.real_path,
                    walk_entry.virtual_path,
                    policy,
                    visit,
                    depth + 1,
                    lineage + (is_last,),
                )


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False
