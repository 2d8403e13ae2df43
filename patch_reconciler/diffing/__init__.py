"""Line-level diffing: fuzzy lines, patches, unified diff parsing."""

from .fuzzy_line import FuzzyLine, fuzzy_key
from .patch import (
    Chunk, ChangeDelta, Patch, VerifyChunk,
    PatchFailedError, PatchOutOfBoundsError, PatchContentMismatchError,
)
from .unified_diff import UnifiedDiffParser, parse_unified_diff
from .line_diff import diff_lines, unified_diff_text

__all__ = [
    "FuzzyLine", "fuzzy_key",
    "Chunk", "ChangeDelta", "Patch", "VerifyChunk",
    "PatchFailedError", "PatchOutOfBoundsError", "PatchContentMismatchError",
    "UnifiedDiffParser", "parse_unified_diff",
    "diff_lines", "unified_diff_text",
]
