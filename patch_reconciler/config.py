"""
Configuration — loads settings from .patch_reconciler.yaml, environment
variables, and built-in defaults (in that priority order: explicit
overrides > env > YAML > defaults).
"""

from __future__ import annotations

import logging
import os

import yaml

from .matching.alignment_finder import AlignmentConfig
from .matching.chunk_finder import ChunkConfig
from .matching.token_finder import TokenSearchConfig
from .matching.tokenizer import GENERAL_TEXT, LanguageProfile, TokenFilterConfig

logger = logging.getLogger(__name__)

_ENV_PREFIX = "PATCH_RECONCILER_"

_DEFAULTS = {
    # Chunk finder
    "similarity_threshold": 0.7,
    "sliding_window_step": 5,
    "min_chunk_size": 20,
    "max_chunk_size": 500,
    "max_search_text_length": 5000,
    "pre_filter_threshold": 0.6,
    "min_found_ratio": 0.3,
    # Local alignment
    "match_score": 2,
    "mismatch_penalty": -1,
    "gap_penalty": -1,
    "min_alignment_score": 10,
    "max_alignment_cells": 2_000_000,
    # Token finder
    "ignore_comments": False,
    "ignore_string_literals": False,
    "case_sensitive": True,
    "require_complete_token_match": True,
    "numbers_are_generic": False,
    "comments_are_generic": True,
    # Patch application
    "fuzz_ladder": (1, 3, 10, 50, 100),
    # Formatting
    "indent_width": 4,
    "tab_width": 4,
    "use_tabs": False,
    "reformat_replacement": True,
    # Metrics
    "metrics_enabled": False,
    "metrics_dir": ".patch_reconciler",
}

# Config file search locations
_CONFIG_FILENAMES = [".patch_reconciler.yaml", ".patch_reconciler.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("[Config] Ignoring unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _to_ladder(value) -> tuple[int, ...]:
    if isinstance(value, str):
        parts = [p for p in value.replace(" ", "").split(",") if p]
    else:
        parts = list(value)
    ladder = tuple(int(p) for p in parts)
    if any(step < 0 for step in ladder):
        raise ValueError(f"fuzz_ladder steps must be non-negative: {ladder}")
    return ladder


class ReconcileConfig:
    """Reconciler configuration.

    Settings are resolved in priority order:
    1. Keyword overrides passed by the caller
    2. Environment variables (``PATCH_RECONCILER_<KEY>``)
    3. .patch_reconciler.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None, **overrides):
        unknown = set(overrides) - set(_DEFAULTS)
        if unknown:
            raise TypeError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        yd = yaml_data or {}

        # Helper: override > env > yaml > default
        def _get(key: str, cast=str):
            if key in overrides:
                return cast(overrides[key])
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return cast(yaml_val)
            return cast(_DEFAULTS[key])

        self.SIMILARITY_THRESHOLD = _get("similarity_threshold", cast=float)
        self.SLIDING_WINDOW_STEP = _get("sliding_window_step", cast=int)
        self.MIN_CHUNK_SIZE = _get("min_chunk_size", cast=int)
        self.MAX_CHUNK_SIZE = _get("max_chunk_size", cast=int)
        self.MAX_SEARCH_TEXT_LENGTH = _get("max_search_text_length", cast=int)
        self.PRE_FILTER_THRESHOLD = _get("pre_filter_threshold", cast=float)
        self.MIN_FOUND_RATIO = _get("min_found_ratio", cast=float)

        self.MATCH_SCORE = _get("match_score", cast=int)
        self.MISMATCH_PENALTY = _get("mismatch_penalty", cast=int)
        self.GAP_PENALTY = _get("gap_penalty", cast=int)
        self.MIN_ALIGNMENT_SCORE = _get("min_alignment_score", cast=int)
        self.MAX_ALIGNMENT_CELLS = _get("max_alignment_cells", cast=int)

        self.IGNORE_COMMENTS = _get("ignore_comments", cast=_to_bool)
        self.IGNORE_STRING_LITERALS = _get("ignore_string_literals", cast=_to_bool)
        self.CASE_SENSITIVE = _get("case_sensitive", cast=_to_bool)
        self.REQUIRE_COMPLETE_TOKEN_MATCH = _get("require_complete_token_match", cast=_to_bool)
        self.NUMBERS_ARE_GENERIC = _get("numbers_are_generic", cast=_to_bool)
        self.COMMENTS_ARE_GENERIC = _get("comments_are_generic", cast=_to_bool)

        self.FUZZ_LADDER = _get("fuzz_ladder", cast=_to_ladder)

        self.INDENT_WIDTH = _get("indent_width", cast=int)
        self.TAB_WIDTH = _get("tab_width", cast=int)
        self.USE_TABS = _get("use_tabs", cast=_to_bool)
        self.REFORMAT_REPLACEMENT = _get("reformat_replacement", cast=_to_bool)

        self.METRICS_ENABLED = _get("metrics_enabled", cast=_to_bool)
        self.METRICS_DIR = _get("metrics_dir")

    def chunk_config(self) -> ChunkConfig:
        return ChunkConfig(
            min_chunk_size=self.MIN_CHUNK_SIZE,
            max_chunk_size=self.MAX_CHUNK_SIZE,
            similarity_threshold=self.SIMILARITY_THRESHOLD,
            sliding_window_step=self.SLIDING_WINDOW_STEP,
            max_search_text_length=self.MAX_SEARCH_TEXT_LENGTH,
            pre_filter_threshold=self.PRE_FILTER_THRESHOLD,
            min_found_ratio=self.MIN_FOUND_RATIO,
        )

    def alignment_config(self) -> AlignmentConfig:
        return AlignmentConfig(
            match_score=self.MATCH_SCORE,
            mismatch_penalty=self.MISMATCH_PENALTY,
            gap_penalty=self.GAP_PENALTY,
            max_cells=self.MAX_ALIGNMENT_CELLS,
        )

    def token_config(self, profile: LanguageProfile = GENERAL_TEXT) -> TokenSearchConfig:
        return TokenSearchConfig(
            profile=profile,
            filter=TokenFilterConfig(
                ignore_comments=self.IGNORE_COMMENTS,
                ignore_string_literals=self.IGNORE_STRING_LITERALS,
                case_sensitive=self.CASE_SENSITIVE,
            ),
            require_complete_token_match=self.REQUIRE_COMPLETE_TOKEN_MATCH,
            numbers_are_generic=self.NUMBERS_ARE_GENERIC,
            comments_are_generic=self.COMMENTS_ARE_GENERIC,
        )

    @classmethod
    def load(cls, config_path: str | None = None, **overrides) -> "ReconcileConfig":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        if path:
            logger.debug("[Config] Loaded %s", path)
        return cls(yaml_data, **overrides)
