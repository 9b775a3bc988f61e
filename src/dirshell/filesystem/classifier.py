"""
Text/binary classification of byte samples.
"""

from pathlib import Path
from typing import Union

DEFAULT_SNIFF_BYTES = 4096

_PRINTABLE_RATIO = 0.85


def _is_printable(b: int) -> bool:
    return b in (9, 10, 13) or 32 <= b <= 126


def looks_text(sample: bytes) -> bool:
    """
    Heuristic text check.

    Any NUL byte means binary. Valid UTF-8 means text. Otherwise the sample
    is text when at least 85% of its bytes are tab, newline, carriage return
    or printable ASCII.
    """
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
        return True
    except UnicodeDecodeError:
        pass
    if not sample:
        return True
    printable = sum(1 for b in sample if _is_printable(b))
    return printable / len(sample) >= _PRINTABLE_RATIO


def read_sample(path: Union[str, Path], size: int = DEFAULT_SNIFF_BYTES) -> bytes:
    """Read at most size bytes from the start of a file."""
    with open(path, "rb") as f:
        return f.read(size)


def file_looks_text(path: Union[str, Path], size: int = DEFAULT_SNIFF_BYTES) -> bool:
    """Classify a file by its leading bytes."""
    return looks_text(read_sample(path, size))
