"""
Documentation preview for a directory (README and friends).
"""

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_PREFERRED = (
    ("readme.md", "markdown"),
    ("readme.txt", "text"),
    ("readme.rst", "rst"),
    ("readme.nfo", "nfo"),
)

_BY_EXTENSION = {
    ".md": "markdown",
    ".txt": "text",
    ".rst": "rst",
    ".nfo": "nfo",
}


def _read(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Cannot read doc file {path}: {e}")
        return None


def read_doc_file(directory: Path) -> tuple[str, str]:
    """
    Find and read the documentation file of a directory.

    README.md, README.txt, README.rst and README.nfo are tried first
    (case-insensitive), then any file with one of those extensions.

    Returns:
        (content, doc_type), or ("", "") when there is none
    """
    try:
        with os.scandir(directory) as it:
            files = sorted(
                (e for e in it if e.is_file(follow_symlinks=False)),
                key=lambda e: e.name,
            )
    except OSError:
        return "", ""

    for wanted, doc_type in _PREFERRED:
        for entry in files:
            if entry.name.lower() == wanted:
                content = _read(Path(entry.path))
                if content is not None:
                    return content, doc_type

    for entry in files:
        doc_type = _BY_EXTENSION.get(os.path.splitext(entry.name)[1].lower())
        if doc_type:
            content = _read(Path(entry.path))
            if content is not None:
                return content, doc_type

    return "", ""
