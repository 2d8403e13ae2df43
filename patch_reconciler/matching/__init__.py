"""Region finders — locate a needle in a possibly drifted haystack."""

from .normalizer import NormalizedText, normalize, normalize_whitespace, map_to_original
from .tokenizer import (
    Token, TokenType, LanguageProfile, TokenFilterConfig,
    C_LIKE, PYTHON, GENERAL_TEXT,
    tokenize, filter_tokens, describe_tokens,
    profile_for_language, profile_for_path,
)
from .region import Region, RegionError, RegionMatch, FinderStrategy
from .chunk_finder import ChunkFinder, ChunkConfig, ChunkMatch
from .alignment_finder import AlignmentFinder, AlignmentConfig, Alignment
from .token_finder import TokenFinder, TokenSearchConfig
from .strategy import RegionLocator

__all__ = [
    "NormalizedText", "normalize", "normalize_whitespace", "map_to_original",
    "Token", "TokenType", "LanguageProfile", "TokenFilterConfig",
    "C_LIKE", "PYTHON", "GENERAL_TEXT",
    "tokenize", "filter_tokens", "describe_tokens",
    "profile_for_language", "profile_for_path",
    "Region", "RegionError", "RegionMatch", "FinderStrategy",
    "ChunkFinder", "ChunkConfig", "ChunkMatch",
    "AlignmentFinder", "AlignmentConfig", "Alignment",
    "TokenFinder", "TokenSearchConfig",
    "RegionLocator",
]
