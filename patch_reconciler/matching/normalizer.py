"""
Whitespace normalizer — collapses whitespace runs for fuzzy comparison
while keeping a way back to offsets in the original text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_whitespace(text: str, trim: bool = False) -> str:
    """Replace every maximal whitespace run with a single space."""
    collapsed = _WHITESPACE_RUN.sub(" ", text)
    return collapsed.strip() if trim else collapsed


def map_to_original(original: str, normalized_offset: int) -> int:
    """Map an offset in ``normalize_whitespace(original)`` back to *original*.

    Each non-whitespace character counts as one normalized unit and each
    whole whitespace run counts as one unit.  An offset that lands inside
    a collapsed run resolves to the end of that run.
    """
    if normalized_offset <= 0:
        return 0

    idx = 0
    consumed = 0
    length = len(original)
    while idx < length and consumed < normalized_offset:
        if original[idx].isspace():
            idx += 1
            while idx < length and original[idx].isspace():
                idx += 1
        else:
            idx += 1
        consumed += 1
    return idx


@dataclass(frozen=True)
class NormalizedText:
    """A whitespace-collapsed view of ``original``.

    ``leading_trim`` is 1 when a leading space was stripped from the
    collapsed text, so offsets into ``text`` are shifted by one unit
    before being mapped back.
    """
    original: str
    text: str
    leading_trim: int = 0

    def map_back(self, offset: int) -> int:
        if offset == 0 and self.leading_trim == 0:
            return 0
        return map_to_original(self.original, offset + self.leading_trim)

    def __len__(self) -> int:
        return len(self.text)


def normalize(text: str, trim: bool = False) -> NormalizedText:
    """Collapse whitespace in *text* and return it with its inverse mapping."""
    collapsed = normalize_whitespace(text)
    if not trim:
        return NormalizedText(original=text, text=collapsed)

    leading = 1 if collapsed.startswith(" ") else 0
    return NormalizedText(
        original=text,
        text=collapsed.strip(),
        leading_trim=leading,
    )
