"""
Strategy selection — runs the region finders under a fixed tie-break
policy.

Policy: a token-sequence hit wins; otherwise the local alignment, if it
scores at least ``min_alignment_score``; otherwise the chunk finder's
union region; otherwise no match.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from .alignment_finder import AlignmentConfig, AlignmentFinder
from .chunk_finder import ChunkConfig, ChunkFinder
from .region import FinderStrategy, RegionMatch
from .token_finder import TokenFinder, TokenSearchConfig
from .tokenizer import LanguageProfile

logger = logging.getLogger(__name__)


class RegionLocator:
    """Locate a needle in a haystack using all three finders."""

    def __init__(
        self,
        chunk_config: ChunkConfig | None = None,
        alignment_config: AlignmentConfig | None = None,
        token_config: TokenSearchConfig | None = None,
        min_alignment_score: int = 10,
    ) -> None:
        self._chunk = ChunkFinder(chunk_config)
        self._alignment = AlignmentFinder(alignment_config)
        self._token = TokenFinder(token_config)
        self._min_alignment_score = min_alignment_score

    def with_profile(self, profile: LanguageProfile) -> "RegionLocator":
        """Copy of this locator whose token finder uses *profile*."""
        return RegionLocator(
            chunk_config=self._chunk.config,
            alignment_config=self._alignment.config,
            token_config=replace(self._token.config, profile=profile),
            min_alignment_score=self._min_alignment_score,
        )

    def locate(self, needle: str, haystack: str) -> RegionMatch | None:
        """Best region for *needle* in *haystack*, or None."""
        region = self._token.find_matching_region(needle, haystack)
        if region is not None:
            logger.debug("[Locate] Token-sequence match at [%d, %d)", region.start, region.end)
            return RegionMatch(
                region=region,
                strategy=FinderStrategy.TOKEN,
                score=self._token.count_tokens(needle),
            )

        alignment = self._alignment.align(needle, haystack)
        if alignment is not None and alignment.score >= self._min_alignment_score:
            logger.debug(
                "[Locate] Local alignment at [%d, %d) score=%d",
                alignment.region.start, alignment.region.end, alignment.score,
            )
            return RegionMatch(
                region=alignment.region,
                strategy=FinderStrategy.LOCAL_ALIGNMENT,
                score=alignment.score,
            )

        chunk = self._chunk.find_match(needle, haystack)
        if chunk is not None:
            logger.debug(
                "[Locate] Chunk union at [%d, %d) (%d/%d chunks)",
                chunk.region.start, chunk.region.end,
                chunk.chunks_found, chunk.chunks_total,
            )
            return RegionMatch(
                region=chunk.region,
                strategy=FinderStrategy.CHUNK,
                score=chunk.chunks_found,
            )

        logger.debug("[Locate] No finder produced a region")
        return None

    def locate_all(self, needle: str, haystack: str) -> dict[FinderStrategy, RegionMatch | None]:
        """Each strategy's own result, without the tie-break (audit view)."""
        results: dict[FinderStrategy, RegionMatch | None] = {}

        region = self._token.find_matching_region(needle, haystack)
        results[FinderStrategy.TOKEN] = (
            RegionMatch(region, FinderStrategy.TOKEN, self._token.count_tokens(needle))
            if region is not None else None
        )

        alignment = self._alignment.align(needle, haystack)
        results[FinderStrategy.LOCAL_ALIGNMENT] = (
            RegionMatch(alignment.region, FinderStrategy.LOCAL_ALIGNMENT, alignment.score)
            if alignment is not None else None
        )

        chunk = self._chunk.find_match(needle, haystack)
        results[FinderStrategy.CHUNK] = (
            RegionMatch(chunk.region, FinderStrategy.CHUNK, chunk.chunks_found)
            if chunk is not None else None
        )
        return results
