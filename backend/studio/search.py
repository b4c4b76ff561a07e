"""Case-insensitive find and literal replace-all over a text buffer"""

import re
from typing import NamedTuple, Optional


class MatchRange(NamedTuple):
    start: int
    end: int


def find_next(text: str, query: str, position: int = 0) -> Optional[MatchRange]:
    """Search forward from position, wrapping to the start on a miss"""
    if not query:
        return None
    haystack = text.lower()
    needle = query.lower()
    index = haystack.find(needle, max(position, 0))
    if index == -1:
        index = haystack.find(needle)
    if index == -1:
        return None
    return MatchRange(index, index + len(query))


def find_prev(text: str, query: str, position: int) -> Optional[MatchRange]:
    """Search backward for a match starting before position. Does not wrap."""
    if not query:
        return None
    haystack = text.lower()
    needle = query.lower()
    # a match may start at position - 1 and extend past position; a caret at 0
    # still finds a match at the very start
    index = haystack.rfind(needle, 0, max(position - 1, 0) + len(needle))
    if index == -1:
        return None
    return MatchRange(index, index + len(query))


def replace_all(text: str, query: str, replacement: str) -> str:
    """Replace every occurrence of query, matched literally and case-insensitively"""
    if not query:
        return text
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    return pattern.sub(lambda _: replacement, text)
