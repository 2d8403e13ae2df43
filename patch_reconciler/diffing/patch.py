"""
Line patches — chunks, change deltas and exact/fuzzy application.

A :class:`Patch` is a list of :class:`ChangeDelta` objects, each replacing
a source chunk of lines with a target chunk.  Lines may be plain strings
or :class:`~patch_reconciler.diffing.fuzzy_line.FuzzyLine` objects; the
comparison is whatever ``==`` the line type defines.

Application never mutates its input: every call works on a fresh copy
and either returns the complete patched list or raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VerifyChunk(Enum):
    OK = "ok"
    POSITION_OUT_OF_TARGET = "position_out_of_target"
    CONTENT_DOES_NOT_MATCH_TARGET = "content_does_not_match_target"


class PatchFailedError(Exception):
    """Raised when a patch cannot be applied to a line list."""

    def __init__(self, message: str, reason: VerifyChunk) -> None:
        super().__init__(message)
        self.reason = reason


class PatchOutOfBoundsError(PatchFailedError):
    """A delta points outside the target line list."""

    def __init__(self, message: str) -> None:
        super().__init__(message, VerifyChunk.POSITION_OUT_OF_TARGET)


class PatchContentMismatchError(PatchFailedError):
    """A delta's source lines are not found where (or near where) expected."""

    def __init__(self, message: str) -> None:
        super().__init__(message, VerifyChunk.CONTENT_DOES_NOT_MATCH_TARGET)


@dataclass
class Chunk(Generic[T]):
    """A run of lines starting at ``position`` in some line list.

    ``changed_positions`` are the absolute positions of the lines that
    the delta removes (source side) or adds (target side); the remaining
    lines are context.
    """
    position: int
    lines: list[T] = field(default_factory=list)
    changed_positions: list[int] = field(default_factory=list)

    def size(self) -> int:
        return len(self.lines)

    def last(self) -> int:
        return self.position + self.size() - 1

    def leading_context(self) -> int:
        if not self.changed_positions:
            return self.size()
        return max(0, min(self.changed_positions) - self.position)

    def trailing_context(self) -> int:
        if not self.changed_positions:
            return self.size()
        return max(0, self.last() - max(self.changed_positions))

    def verify_chunk(
        self,
        target: Sequence,
        position: int | None = None,
        head: int = 0,
        tail: int = 0,
    ) -> VerifyChunk:
        """Check that this chunk's lines appear in *target* at *position*.

        The first *head* and last *tail* lines are ignored; they may even
        fall outside *target*.
        """
        if position is None:
            position = self.position
        size = self.size()
        if position < 0 or position + head > len(target) or position + size - tail > len(target):
            return VerifyChunk.POSITION_OUT_OF_TARGET
        for i in range(head, size - tail):
            if not target[position + i] == self.lines[i]:
                return VerifyChunk.CONTENT_DOES_NOT_MATCH_TARGET
        return VerifyChunk.OK


@dataclass
class ChangeDelta(Generic[T]):
    """Replace ``source`` lines with ``target`` lines."""
    source: Chunk[T]
    target: Chunk[T]

    def max_fuzz(self) -> tuple[int, int]:
        """How many leading/trailing lines are pure context on both sides."""
        head = min(self.source.leading_context(), self.target.leading_context())
        tail = min(self.source.trailing_context(), self.target.trailing_context())
        # Keep at least one line of the source compared when it has any.
        while head + tail >= self.source.size() and (head or tail):
            if tail >= head:
                tail -= 1
            else:
                head -= 1
        return head, tail

    def apply_at(self, lines: list, position: int, head: int = 0, tail: int = 0) -> None:
        """Splice the target lines into *lines* at *position*, in place.

        Ignored context lines stay as they are in *lines*.
        """
        src_end = position + self.source.size() - tail
        replacement = self.target.lines[head:self.target.size() - tail]
        lines[position + head:src_end] = replacement


@dataclass
class Patch(Generic[T]):
    deltas: list[ChangeDelta[T]] = field(default_factory=list)

    def add_delta(self, delta: ChangeDelta[T]) -> None:
        self.deltas.append(delta)

    def is_empty(self) -> bool:
        return not self.deltas

    def _ordered(self) -> list[ChangeDelta[T]]:
        return sorted(self.deltas, key=lambda d: d.source.position)

    # ------------------------------------------------------------------
    # Exact application
    # ------------------------------------------------------------------

    def apply_to(self, target: Sequence) -> list:
        """Apply every delta at exactly its recorded position.

        Deltas are applied bottom-up so earlier positions stay valid.
        """
        result = list(target)
        for delta in reversed(self._ordered()):
            verdict = delta.source.verify_chunk(result)
            if verdict is VerifyChunk.POSITION_OUT_OF_TARGET:
                raise PatchOutOfBoundsError(
                    f"Delta at line {delta.source.position} spans "
                    f"{delta.source.size()} lines but target has {len(result)}"
                )
            if verdict is VerifyChunk.CONTENT_DOES_NOT_MATCH_TARGET:
                raise PatchContentMismatchError(
                    f"Delta at line {delta.source.position} does not match target content"
                )
            delta.apply_at(result, delta.source.position)
        return result

    # ------------------------------------------------------------------
    # Fuzzy application
    # ------------------------------------------------------------------

    def apply_fuzzy(self, target: Sequence, max_fuzz: int, floor: int = 0) -> list:
        """Apply deltas top-down, tolerating shifted positions and up to
        *max_fuzz* ignored context lines at either end of each delta.

        For each fuzz level (0 first) the delta is tried at its expected
        position and then at increasing distances before and after it.
        A delta is never placed before the end of the previous one, nor
        before index *floor*.
        """
        result = list(target)
        shift = 0
        last_end = floor - 1

        for delta in self._ordered():
            expected = delta.source.position + shift
            found = self._find_position(result, delta, expected, last_end, max_fuzz)
            if found is None:
                raise PatchContentMismatchError(
                    f"Delta at line {delta.source.position} not found within fuzz {max_fuzz}"
                )
            position, head, tail = found
            delta.apply_at(result, position, head, tail)
            if position != expected or head or tail:
                logger.debug(
                    "[FuzzyDiff] Delta at %d applied at %d (head=%d, tail=%d)",
                    delta.source.position, position, head, tail,
                )
            shift = position - delta.source.position + delta.target.size() - delta.source.size()
            last_end = position + delta.target.size() - 1
        return result

    @staticmethod
    def _find_position(
        lines: list,
        delta: ChangeDelta,
        expected: int,
        last_end: int,
        max_fuzz: int,
    ) -> tuple[int, int, int] | None:
        limit_head, limit_tail = delta.max_fuzz()
        in_range_seen = False

        for fuzz in range(max_fuzz + 1):
            head = min(fuzz, limit_head)
            tail = min(fuzz, limit_tail)
            if fuzz and head == min(fuzz - 1, limit_head) and tail == min(fuzz - 1, limit_tail):
                # Same effective fuzz as the previous level.
                continue

            if expected > last_end:
                verdict = delta.source.verify_chunk(lines, expected, head, tail)
                if verdict is VerifyChunk.OK:
                    return expected, head, tail
                in_range_seen |= verdict is not VerifyChunk.POSITION_OUT_OF_TARGET

            before_done = False
            after_done = False
            distance = 1
            while not (before_done and after_done):
                if not before_done:
                    pos = expected - distance
                    if pos <= last_end or pos < 0:
                        before_done = True
                    else:
                        verdict = delta.source.verify_chunk(lines, pos, head, tail)
                        if verdict is VerifyChunk.OK:
                            return pos, head, tail
                        in_range_seen |= verdict is not VerifyChunk.POSITION_OUT_OF_TARGET
                if not after_done:
                    pos = expected + distance
                    if pos + delta.source.size() - tail > len(lines):
                        after_done = True
                    elif pos > last_end:
                        verdict = delta.source.verify_chunk(lines, pos, head, tail)
                        if verdict is VerifyChunk.OK:
                            return pos, head, tail
                        in_range_seen |= verdict is not VerifyChunk.POSITION_OUT_OF_TARGET
                distance += 1

        if not in_range_seen:
            raise PatchOutOfBoundsError(
                f"Delta at line {delta.source.position} ({delta.source.size()} lines) "
                f"does not fit a target of {len(lines)} lines"
            )
        return None
