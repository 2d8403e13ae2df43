"""
Token-sequence finder — exact runs of filtered tokens.

The most precise finder: whitespace never takes part in the comparison,
and optional genericity rules let all numbers or all comments compare
equal, but any other literal drift defeats it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .region import Region
from .tokenizer import (
    GENERAL_TEXT,
    LanguageProfile,
    Token,
    TokenFilterConfig,
    TokenType,
    filter_tokens,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenSearchConfig:
    profile: LanguageProfile = GENERAL_TEXT
    filter: TokenFilterConfig = field(default_factory=TokenFilterConfig)
    require_complete_token_match: bool = True
    numbers_are_generic: bool = False
    comments_are_generic: bool = True


class TokenFinder:
    """Slide the needle's token sequence over the haystack's."""

    def __init__(self, config: TokenSearchConfig | None = None) -> None:
        self.config = config or TokenSearchConfig()

    def tokens_equal(self, a: Token, b: Token) -> bool:
        if a.type is not b.type:
            return False
        if self.config.numbers_are_generic and a.type is TokenType.NUMBER:
            return True
        if self.config.comments_are_generic and a.type is TokenType.COMMENT:
            return True
        if self.config.require_complete_token_match:
            return a.value == b.value
        return a.value in b.value or b.value in a.value

    def find_matching_region(self, needle: str, haystack: str) -> Region | None:
        """Region of the first token run equal to the needle's tokens."""
        needle_tokens, hay_tokens = self._prepare(needle, haystack)
        if not needle_tokens:
            return None
        for idx in self._match_starts(needle_tokens, hay_tokens):
            return self._region(hay_tokens, idx, len(needle_tokens))
        return None

    def find_all_matching_regions(self, needle: str, haystack: str) -> list[Region]:
        needle_tokens, hay_tokens = self._prepare(needle, haystack)
        if not needle_tokens:
            return []
        return [
            self._region(hay_tokens, idx, len(needle_tokens))
            for idx in self._match_starts(needle_tokens, hay_tokens)
        ]

    def count_tokens(self, text: str) -> int:
        """Number of tokens that take part in matching."""
        return len(filter_tokens(tokenize(text, self.config.profile), self.config.filter))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _prepare(self, needle: str, haystack: str) -> tuple[list[Token], list[Token]]:
        profile = self.config.profile
        needle_tokens = filter_tokens(tokenize(needle, profile), self.config.filter)
        hay_tokens = filter_tokens(tokenize(haystack, profile), self.config.filter)
        logger.debug(
            "[TokenFinder] %s: %d needle tokens, %d haystack tokens",
            profile.name, len(needle_tokens), len(hay_tokens),
        )
        return needle_tokens, hay_tokens

    def _match_starts(self, needle: list[Token], haystack: list[Token]):
        n = len(needle)
        for i in range(len(haystack) - n + 1):
            if all(self.tokens_equal(needle[j], haystack[i + j]) for j in range(n)):
                yield i

    @staticmethod
    def _region(tokens: list[Token], index: int, count: int) -> Region:
        return Region(tokens[index].start, tokens[index + count - 1].end)
