"""
FuzzyLine — a diff line that compares equal to another line when both
agree after trimming and case folding.

Lets hunks generated against slightly different indentation, trailing
whitespace or casing still line up with the live buffer.
"""

from __future__ import annotations

from functools import total_ordering


def fuzzy_key(line: str) -> str:
    return line.strip().casefold()


@total_ordering
class FuzzyLine:
    """Wraps one line of text; equality and hashing use :func:`fuzzy_key`.

    Only other FuzzyLines compare equal; a plain ``str`` never does, so
    equal objects always hash equal.  Ordering is plain lexicographic on
    the raw text and exists only for deterministic sorting.
    """

    __slots__ = ("line", "_key")

    def __init__(self, line: str) -> None:
        self.line = line
        self._key = fuzzy_key(line)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FuzzyLine):
            return self._key == other._key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key)

    def __lt__(self, other: object) -> bool:
        if isinstance(other, FuzzyLine):
            return self.line < other.line
        return NotImplemented

    def __len__(self) -> int:
        return len(self.line)

    def __str__(self) -> str:
        return self.line

    def __repr__(self) -> str:
        return f"FuzzyLine({self.line!r})"
