"""
Chunk finder — locates a needle by splitting it into paragraph/statement
sized chunks, finding each chunk separately and returning the union of
the chunk spans.

The result is a superset region: chunks resolve
independently, so whatever lies between the first and last resolved
chunk is included.  Callers that need precision combine this finder
with the token-sequence finder.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass

from .normalizer import normalize
from .region import Region

logger = logging.getLogger(__name__)

_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_STATEMENT_SPLIT = re.compile(r"(?<=;)|(?<=\})|(?<=\{)")

# Above this many characters LCS is replaced by a frequency intersection.
_LCS_LIMIT = 1000


@dataclass(frozen=True)
class ChunkConfig:
    min_chunk_size: int = 20
    max_chunk_size: int = 500
    similarity_threshold: float = 0.7
    sliding_window_step: int = 5
    max_search_text_length: int = 5000
    pre_filter_threshold: float = 0.6
    min_found_ratio: float = 0.3


@dataclass(frozen=True)
class ChunkMatch:
    """Union region plus how many of the needle's chunks resolved."""
    region: Region
    chunks_found: int
    chunks_total: int

    @property
    def found_ratio(self) -> float:
        return self.chunks_found / self.chunks_total if self.chunks_total else 0.0


# ---------------------------------------------------------------------------
# Similarity helpers
# ---------------------------------------------------------------------------

def lcs_length(a: str, b: str) -> int:
    """Length of the longest common subsequence of *a* and *b*.

    Bit-parallel form of the O(n*m) dynamic programme: one bit per
    character of *a*, one big-int step per character of *b*.
    """
    if not a or not b:
        return 0
    masks: dict[str, int] = {}
    for i, ch in enumerate(a):
        masks[ch] = masks.get(ch, 0) | (1 << i)
    full = (1 << len(a)) - 1
    v = full
    for ch in b:
        u = v & masks.get(ch, 0)
        v = ((v + u) | (v - u)) & full
    return len(a) - bin(v).count("1")


def approximate_similarity(a: str, b: str) -> int:
    """Character-frequency intersection size, an O(n) stand-in for LCS."""
    fa = Counter(ch for ch in a if ord(ch) < 128)
    fb = Counter(ch for ch in b if ord(ch) < 128)
    return sum((fa & fb).values())


def _letter_frequencies(text: str) -> Counter:
    return Counter(ch for ch in text.lower() if "a" <= ch <= "z")


def similarity(a: str, b: str) -> int:
    if len(a) > _LCS_LIMIT or len(b) > _LCS_LIMIT:
        return approximate_similarity(a, b)
    return lcs_length(a, b)


def split_into_chunks(text: str, config: ChunkConfig | None = None) -> list[str]:
    """Split *text* into trimmed chunks suitable for independent search."""
    config = config or ChunkConfig()
    chunks: list[str] = []

    for paragraph in _PARAGRAPH_SPLIT.split(text):
        stripped = paragraph.strip()
        if not stripped:
            continue
        if len(paragraph) > config.max_chunk_size:
            for statement in _STATEMENT_SPLIT.split(paragraph):
                statement = statement.strip()
                if statement and len(statement) >= config.min_chunk_size:
                    chunks.append(statement)
        elif len(stripped) >= config.min_chunk_size:
            chunks.append(stripped)

    # Too few chunks: regroup line by line into ~2x min-size pieces.
    if len(chunks) < 3 and len(text) > config.min_chunk_size:
        chunks = []
        current: list[str] = []
        current_len = 0
        for line in text.split("\n"):
            if not line.strip():
                continue
            current.append(line)
            current_len += len(line) + 1
            if current_len > config.min_chunk_size * 2:
                chunks.append("\n".join(current).strip())
                current = []
                current_len = 0
        if current:
            chunks.append("\n".join(current).strip())

    return chunks


# ---------------------------------------------------------------------------
# ChunkFinder
# ---------------------------------------------------------------------------

class ChunkFinder:
    """Find a needle by resolving its chunks and unioning their spans."""

    def __init__(self, config: ChunkConfig | None = None) -> None:
        self.config = config or ChunkConfig()

    def find_matching_region(self, needle: str, haystack: str) -> Region | None:
        match = self.find_match(needle, haystack)
        return match.region if match else None

    def find_match(self, needle: str, haystack: str) -> ChunkMatch | None:
        """Like :meth:`find_matching_region` but keeps the chunk counts."""
        if not needle.strip() or not haystack:
            return None
        if len(haystack) > self.config.max_search_text_length:
            return self._find_in_large_text(needle, haystack)
        return self._find_impl(needle, haystack)

    def find_all_matching_regions(self, needle: str, haystack: str) -> list[Region]:
        """Every resolved chunk span, in haystack order (audit view)."""
        regions = []
        for chunk in split_into_chunks(needle, self.config):
            region = self.find_chunk_position(chunk, haystack)
            if region is not None:
                regions.append(region)
        return sorted(regions, key=lambda r: (r.start, r.end))

    # ------------------------------------------------------------------
    # Internal search
    # ------------------------------------------------------------------

    def _find_in_large_text(self, needle: str, haystack: str) -> ChunkMatch | None:
        """Search representative sections of a haystack that is too large
        to scan in full: first, middle and last third, then both halves."""
        size = self.config.max_search_text_length // 3
        half = self.config.max_search_text_length // 2
        total = len(haystack)
        middle = (total - size) // 2

        sections = [
            (0, size),
            (middle, middle + size),
            (total - size, total),
            (0, half),
            (total - half, total),
        ]
        for start, end in sections:
            match = self._find_impl(needle, haystack[start:end])
            if match is not None:
                logger.debug(
                    "[ChunkFinder] Matched in section [%d, %d) of %d chars",
                    start, end, total,
                )
                return ChunkMatch(
                    region=match.region.shifted(start),
                    chunks_found=match.chunks_found,
                    chunks_total=match.chunks_total,
                )
        return None

    def _find_impl(self, needle: str, haystack: str) -> ChunkMatch | None:
        chunks = split_into_chunks(needle, self.config)
        if not chunks:
            return None

        found: list[Region] = []
        for chunk in chunks:
            region = self.find_chunk_position(chunk, haystack)
            if region is not None:
                found.append(region)

        if not found:
            return None

        ratio = len(found) / len(chunks)
        if ratio < self.config.min_found_ratio:
            logger.debug(
                "[ChunkFinder] Only %d/%d chunks resolved, rejecting",
                len(found), len(chunks),
            )
            return None

        region = found[0]
        for other in found[1:]:
            region = region.union(other)
        return ChunkMatch(region=region, chunks_found=len(found), chunks_total=len(chunks))

    def find_chunk_position(self, chunk: str, haystack: str) -> Region | None:
        """Locate one chunk: exact after normalization, then fuzzy."""
        norm_chunk = normalize(chunk, trim=True).text
        norm_hay = normalize(haystack)
        if not norm_chunk:
            return None

        idx = norm_hay.text.find(norm_chunk)
        if idx != -1:
            start = norm_hay.map_back(idx)
            end = norm_hay.map_back(idx + len(norm_chunk))
            return Region(start, end)

        span = self._find_fuzzy(norm_chunk, norm_hay.text)
        if span is None:
            return None
        start = norm_hay.map_back(span[0])
        end = norm_hay.map_back(span[1])
        return Region(start, max(start, end))

    def _find_fuzzy(self, chunk: str, text: str) -> tuple[int, int] | None:
        """Sliding-window similarity search in normalized coordinates.

        A coarse pass over windows of ``len(chunk) +/- 10`` characters keeps
        the promising positions; a fine pass around each steps by
        ``sliding_window_step`` with windows of exactly ``len(chunk)``.
        """
        n = len(chunk)
        total = len(text)
        if n > total:
            return None

        best_score = -1
        best_start = -1
        coarse_step = max(20, total // 100)
        promising: list[int] = []
        chunk_freq = _letter_frequencies(chunk)

        for size in range(max(n - 10, 5), min(n + 10, total) + 1):
            for i in range(0, total - size + 1, coarse_step):
                window = text[i:i + size]
                if not self._is_potential_match(chunk_freq, window):
                    continue
                score = similarity(chunk, window)
                if score > best_score * 0.8:
                    promising.append(i)
                if score > best_score:
                    best_score = score
                    best_start = i

        step = max(1, self.config.sliding_window_step)
        for pos in promising:
            lo = max(0, pos - coarse_step // 2)
            hi = min(total - n, pos + coarse_step // 2)
            for i in range(lo, hi + 1, step):
                score = similarity(chunk, text[i:i + n])
                if score > best_score:
                    best_score = score
                    best_start = i

        if best_start < 0 or best_score < n * self.config.similarity_threshold:
            return None
        return best_start, min(best_start + n, total)

    def _is_potential_match(self, fa: Counter, window: str) -> bool:
        """Cheap letter-frequency check before the expensive similarity."""
        fb = _letter_frequencies(window)
        count_a = sum(fa.values())
        count_b = sum(fb.values())

        if abs(count_a - count_b) > count_a * 0.3:
            return False
        shared = sum((fa & fb).values())
        return shared / max(1, count_a, count_b) >= self.config.pre_filter_threshold
