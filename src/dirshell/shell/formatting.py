"""
Text rendering for command output: ANSI colors, long listings, sizes.
"""

import os
import stat
from datetime import datetime

RESET = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
WHITE = "\033[37m"
BRIGHT_BLACK = "\033[90m"
BRIGHT_GREEN = "\033[92m"
BRIGHT_YELLOW = "\033[93m"
BRIGHT_CYAN = "\033[96m"

_EXTENSION_COLORS = {}
for _color, _extensions in (
    (RED, ".tar .tgz .zip .rar .7z .gz .bz2 .xz"),
    (MAGENTA, ".jpg .jpeg .png .gif .bmp .svg .ico .tiff .webp"),
    (GREEN, ".mp3 .wav .flac .aac .ogg .wma .m4a"),
    (BRIGHT_GREEN, ".mp4 .avi .mkv .mov .wmv .flv .webm .m4v"),
    (WHITE, ".pdf .doc .docx .txt .md .rst .tex"),
    (YELLOW, ".py .js .ts .jsx .tsx .go .rs .cpp .c .h .java .kt .swift"),
    (BRIGHT_YELLOW, ".html .htm .css .scss .sass .xml .json .yaml .yml"),
    (GREEN, ".sh .bash .zsh .fish .ps1 .bat .cmd"),
    (BRIGHT_CYAN, ".sql .db .sqlite .sqlite3"),
    (BRIGHT_BLACK, ".log .tmp .temp .bak .backup"),
):
    for _ext in _extensions.split():
        _EXTENSION_COLORS[_ext] = _color

_SIZE_UNITS = "KMGT"


def file_color(mode: int, name: str) -> str:
    """ANSI color for an entry, by type and then by extension."""
    if stat.S_ISDIR(mode):
        return BLUE + BOLD
    if mode & 0o111:
        return GREEN
    if stat.S_ISLNK(mode):
        return CYAN
    if stat.S_ISFIFO(mode):
        return YELLOW
    if stat.S_ISSOCK(mode):
        return MAGENTA
    if stat.S_ISCHR(mode) or stat.S_ISBLK(mode):
        return YELLOW + BOLD
    return _EXTENSION_COLORS.get(os.path.splitext(name)[1].lower(), RESET)


def format_human_size(size: int) -> str:
    """
    Render a byte count with a K/M/G/T suffix.

    >>> format_human_size(512)
    '512B'
    >>> format_human_size(1536)
    '1.5K'
    """
    if size < 1024:
        return f"{size}B"
    value = float(size)
    for unit in _SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == _SIZE_UNITS[-1]:
            return f"{value:.1f}{unit}"


def format_mtime(when: datetime) -> str:
    return f"{when:%b} {when.day:2d} {when:%H:%M}"


def format_long(mode: int, size: int, mod_time: datetime, label: str, human: bool = False) -> str:
    """`ls -l` style line: mode, size, modification time, name."""
    size_text = format_human_size(size) if human else str(size)
    return f"{stat.filemode(mode)} {size_text:>10} {format_mtime(mod_time)} {label}"


class Painter:
    """Applies ANSI colors, or nothing when disabled."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def paint(self, text: str, color: str) -> str:
        if not self.enabled:
            return text
        return f"{color}{text}{RESET}"

    def name(self, mode: int, name: str) -> str:
        """Colorize an entry name; directories get a trailing slash."""
        if stat.S_ISDIR(mode):
            name += "/"
        return self.paint(name, file_color(mode, name))

    def highlight(self, line: str, spans: list[tuple[int, int]]) -> str:
        """Mark the given spans of a line."""
        if not spans:
            return line
        out = []
        last = 0
        for start, end in spans:
            out.append(line[last:start])
            out.append(self.paint(line[start:end], YELLOW + BOLD))
            last = end
        out.append(line[last:])
        return "".join(out)
