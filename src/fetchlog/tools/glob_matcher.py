"""
File name wildcard matching for FetchLog.

Patterns support two wildcards: ``*`` matches any run of characters and
``?`` matches exactly one character. Every other character is literal.
Matching is case-insensitive and always covers the whole name.
"""

import re
from functools import lru_cache


def glob_to_regex(pattern: str) -> str:
    """
    Translate a wildcard pattern into an anchored regular expression.

    Every character is escaped first; the escaped wildcards are then
    substituted with their regex equivalents.

    Args:
        pattern: Wildcard pattern such as ``temp_*.log``

    Returns:
        Regular expression source matching the full name
    """
    escaped = re.escape(pattern)
    escaped = escaped.replace(r'\*', '.*').replace(r'\?', '.')
    return '^' + escaped + '$'


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern:
    return re.compile(glob_to_regex(pattern), re.IGNORECASE | re.DOTALL)


class GlobMatcher:
    """Evaluates wildcard patterns against file names (not paths)."""

    @staticmethod
    def matches(name: str, pattern: str) -> bool:
        """Check if ``name`` matches ``pattern`` in full, ignoring case."""
        return _compile(pattern).fullmatch(name) is not None

    @classmethod
    def matches_any(cls, name: str, patterns) -> bool:
        """Check if ``name`` matches at least one of ``patterns``."""
        return any(cls.matches(name, pattern) for pattern in patterns)
