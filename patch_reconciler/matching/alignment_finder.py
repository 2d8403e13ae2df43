"""
Local-alignment finder — Smith-Waterman alignment over whitespace
normalized text.

Tolerates scattered edits (typos, identifiers renamed to something of
similar length) that defeat exact matching.  Time and memory are
O(n*m), so the caller is expected to bound both inputs; the finder
refuses matrices larger than ``max_cells``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .normalizer import normalize
from .region import Region

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentConfig:
    match_score: int = 2
    mismatch_penalty: int = -1
    gap_penalty: int = -1
    max_cells: int = 2_000_000


@dataclass(frozen=True)
class Alignment:
    """Best local alignment of a needle inside a haystack.

    ``norm_start``/``norm_end`` are in normalized-haystack coordinates,
    ``region`` is in original-haystack coordinates.
    """
    region: Region
    score: int
    norm_start: int
    norm_end: int


class AlignmentFinder:
    """Smith-Waterman search for the best-scoring contiguous region."""

    def __init__(self, config: AlignmentConfig | None = None) -> None:
        self.config = config or AlignmentConfig()

    def find_matching_region(self, needle: str, haystack: str) -> Region | None:
        alignment = self.align(needle, haystack)
        return alignment.region if alignment else None

    def align(self, needle: str, haystack: str) -> Alignment | None:
        """Return the best local alignment, or None when nothing scores above 0."""
        pattern = normalize(needle, trim=True).text
        norm_hay = normalize(haystack)
        text = norm_hay.text

        if not pattern or not text:
            return None

        n = len(pattern)
        m = len(text)
        if n * m > self.config.max_cells:
            logger.warning(
                "[Alignment] Refusing %dx%d matrix (limit %d cells)",
                n, m, self.config.max_cells,
            )
            return None

        match = self.config.match_score
        mismatch = self.config.mismatch_penalty
        gap = self.config.gap_penalty

        rows: list[list[int]] = [[0] * (m + 1)]
        max_score = 0
        max_i = 0
        max_j = 0

        for i in range(1, n + 1):
            prev = rows[i - 1]
            row = [0] * (m + 1)
            pc = pattern[i - 1]
            for j in range(1, m + 1):
                diagonal = prev[j - 1] + (match if pc == text[j - 1] else mismatch)
                up = prev[j] + gap
                left = row[j - 1] + gap
                best = diagonal
                if up > best:
                    best = up
                if left > best:
                    best = left
                if best < 0:
                    best = 0
                row[j] = best
                if best > max_score:
                    max_score = best
                    max_i = i
                    max_j = j
            rows.append(row)

        if max_score == 0:
            return None

        i, j = max_i, max_j
        while i > 0 and j > 0 and rows[i][j] > 0:
            score = rows[i][j]
            step = match if pattern[i - 1] == text[j - 1] else mismatch
            if score == rows[i - 1][j - 1] + step:
                i -= 1
                j -= 1
            elif score == rows[i][j - 1] + gap:
                j -= 1
            else:
                i -= 1

        start = norm_hay.map_back(j)
        end = norm_hay.map_back(max_j)
        logger.debug(
            "[Alignment] score=%d normalized=[%d, %d) original=[%d, %d)",
            max_score, j, max_j, start, end,
        )
        return Alignment(
            region=Region(start, max(start, end)),
            score=max_score,
            norm_start=j,
            norm_end=max_j,
        )
