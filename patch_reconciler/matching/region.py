"""
Regions — half-open character spans returned by every finder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RegionError(ValueError):
    """Raised when a region violates ``0 <= start <= end <= len(text)``."""


@dataclass(frozen=True)
class Region:
    """A ``[start, end)`` span into one specific text buffer."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise RegionError(f"Invalid region [{self.start}, {self.end})")

    @property
    def length(self) -> int:
        return self.end - self.start

    def validate_against(self, text: str) -> "Region":
        """Return self, or raise if the region runs past the end of *text*."""
        if self.end > len(text):
            raise RegionError(
                f"Region [{self.start}, {self.end}) exceeds text length {len(text)}"
            )
        return self

    def text_in(self, text: str) -> str:
        self.validate_against(text)
        return text[self.start:self.end]

    def union(self, other: "Region") -> "Region":
        return Region(min(self.start, other.start), max(self.end, other.end))

    def contains(self, other: "Region") -> bool:
        return self.start <= other.start and other.end <= self.end

    def shifted(self, offset: int) -> "Region":
        return Region(self.start + offset, self.end + offset)


class FinderStrategy(Enum):
    TOKEN = "token"
    LOCAL_ALIGNMENT = "local_alignment"
    CHUNK = "chunk"


@dataclass(frozen=True)
class RegionMatch:
    """A region plus the strategy that produced it.

    ``score`` is strategy specific: the alignment score for
    LOCAL_ALIGNMENT, the number of matched tokens for TOKEN and the
    number of resolved chunks for CHUNK.
    """
    region: Region
    strategy: FinderStrategy
    score: float = 0.0
