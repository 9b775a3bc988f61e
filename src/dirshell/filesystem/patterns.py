"""
Shell-style glob matching where wildcards never cross a path separator.
"""

from fnmatch import fnmatchcase

GLOB_METACHARACTERS = "*?["


def has_glob_meta(pattern: str) -> bool:
    """Return True if pattern contains any glob metacharacter."""
    return any(c in pattern for c in GLOB_METACHARACTERS)


def _segment_pattern(segment: str) -> str:
    # "[^abc]" is accepted as a negated class alongside fnmatch's "[!abc]"
    return segment.replace("[^", "[!")


def glob_match(pattern: str, name: str) -> bool:
    """
    Match name against pattern, segment by segment.

    `*` and `?` match within a single path segment only, so `secret/*`
    matches `secret/a.txt` but not `secret/x/a.txt`. Matching is
    case-sensitive.

    Args:
        pattern: Glob pattern, optionally containing `/`
        name: Slash-separated name or relative path

    Returns:
        True if every segment of name matches the corresponding segment
    """
    pattern_parts = pattern.split("/")
    name_parts = name.split("/")
    if len(pattern_parts) != len(name_parts):
        return False
    return all(
        fnmatchcase(part, _segment_pattern(pat))
        for pat, part in zip(pattern_parts, name_parts)
    )
