"""
Tab completion of virtual paths.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from dirshell.filesystem.classifier import file_looks_text
from dirshell.filesystem.exceptions import EntryNotFoundError, FileSystemError
from dirshell.filesystem.sandbox import PathSandbox, join_virtual, normalize_virtual
from dirshell.filesystem.walker import DirectoryWalker, Order, WalkPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionItem:
    name: str
    is_dir: bool

    def to_dict(self) -> dict:
        return {"name": self.name, "dir": self.is_dir}


class PathCompleter:
    """
    Completes a partially typed path against the directory it points into.

    Usage:
        completer = PathCompleter(sandbox, walker)
        items = completer.complete("/", "docs/RE")
    """

    def __init__(self, sandbox: PathSandbox, walker: DirectoryWalker):
        self.sandbox = sandbox
        self.walker = walker
        self.config = sandbox.config

    def complete(
        self,
        cwd: str,
        typed: str,
        dirs_only: bool = False,
        files_only: bool = False,
        text_only: bool = False,
        max_size: Optional[int] = None,
    ) -> list[CompletionItem]:
        """
        List candidates for the last segment of typed.

        Dotfiles are offered only when the typed segment starts with a dot.
        Resolution failures yield an empty list.

        Args:
            cwd: Current virtual directory
            typed: What the user typed so far
            dirs_only: Offer directories only
            files_only: Offer files only
            text_only: Offer only files whose first bytes look like text
            max_size: Drop files larger than this (None or 0 disables)

        Returns:
            Up to `completion_max_items` items, directories first
        """
        dir_part, _, base = typed.rpartition("/")
        if typed.startswith("/"):
            virtual_dir = normalize_virtual(dir_part)
        else:
            virtual_dir = join_virtual(cwd, dir_part)

        try:
            real_dir = self.sandbox.resolve(virtual_dir)
            if self.walker.ignore.is_hidden(real_dir):
                raise EntryNotFoundError(virtual_dir)
            policy = WalkPolicy(show_hidden=base.startswith("."), order=Order.DIRS_FIRST)
            entries = self.walker.list_directory(real_dir, policy)
        except (FileSystemError, OSError) as e:
            logger.debug(f"No completion for {typed!r}: {e}")
            return []

        items = []
        for entry in entries:
            if not entry.name.startswith(base):
                continue
            try:
                is_dir = entry.is_dir()
                if dirs_only and not is_dir:
                    continue
                if files_only and is_dir:
                    continue
                if not is_dir:
                    if max_size and entry.stat().st_size > max_size:
                        continue
                    if text_only and not file_looks_text(entry.path, self.config.sniff_bytes):
                        continue
            except OSError:
                continue

            items.append(CompletionItem(entry.name, is_dir))
            if len(items) >= self.config.completion_max_items:
                break
        return items
