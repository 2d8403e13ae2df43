"""
Unified diff parser — turns LLM-written unified diff text into a
:class:`~patch_reconciler.diffing.patch.Patch` of fuzzy lines.

The parser is lenient about what surrounds the hunks and strict only
about the ``@@ -a,b +c,d @@`` headers.  Chunk positions are the header's
1-based line numbers as written, so the patch applies to a line list
that carries a placeholder at index 0.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .fuzzy_line import FuzzyLine
from .patch import ChangeDelta, Chunk, Patch

logger = logging.getLogger(__name__)

# Patterns
_HUNK_HEADER = re.compile(
    r"^\s*@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@.*$"
)
_NEW_FILE_MARKER = "+++"
_OLD_FILE_MARKER = "---"
_NO_NEWLINE_MARKER = "\\"


def _start_position(line_number: int, count: int) -> int:
    """Chunk position for a header's line number.

    A zero-length side names the line *after which* it applies.
    """
    if line_number == 0:
        return 1
    if count == 0:
        return line_number + 1
    return line_number


class UnifiedDiffParser:
    """Parse unified diff text hunk by hunk."""

    def parse(self, text: str | Iterable[str]) -> Patch[FuzzyLine]:
        """Parse *text* into a patch.

        Parameters
        ----------
        text:
            The diff, either as one string or as already split lines.

        Returns
        -------
        Patch[FuzzyLine]
            One delta per hunk.  An empty patch means no hunk header was
            found.
        """
        lines = text.splitlines() if isinstance(text, str) else list(text)
        patch: Patch[FuzzyLine] = Patch()

        start = self._body_start(lines)
        if start is None:
            logger.warning("[UnifiedDiff] No hunk header found in %d lines", len(lines))
            return patch

        hunk: _HunkBuilder | None = None
        i = start
        while i < len(lines):
            line = lines[i]
            header = _HUNK_HEADER.match(line)
            if header:
                self._flush(hunk, patch)
                hunk = _HunkBuilder.from_header(header)
            elif (
                line.startswith(_OLD_FILE_MARKER + " ")
                and i + 1 < len(lines)
                and lines[i + 1].startswith(_NEW_FILE_MARKER)
            ):
                # Next file section; its hunks keep going into the same patch.
                self._flush(hunk, patch)
                hunk = None
                i += 1
            elif hunk is not None:
                hunk.add(line)
            i += 1
        self._flush(hunk, patch)

        logger.debug("[UnifiedDiff] Parsed %d hunk(s)", len(patch.deltas))
        return patch

    # ------------------------------------------------------------------
    # Internal parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _body_start(lines: list[str]) -> int | None:
        """Index of the first line after the ``+++`` preamble.

        Diffs with no ``+++`` line at all start at their first hunk
        header instead.
        """
        for i, line in enumerate(lines):
            if line.startswith(_NEW_FILE_MARKER):
                return i + 1
        for i, line in enumerate(lines):
            if _HUNK_HEADER.match(line):
                return i
        return None

    @staticmethod
    def _flush(hunk: "_HunkBuilder | None", patch: Patch[FuzzyLine]) -> None:
        if hunk is not None and hunk.has_lines():
            patch.add_delta(hunk.build())


class _HunkBuilder:
    """Accumulates the body lines of one hunk."""

    def __init__(self, old_position: int, new_position: int) -> None:
        self.old_position = old_position
        self.new_position = new_position
        self.source: list[FuzzyLine] = []
        self.target: list[FuzzyLine] = []
        self.removed: list[int] = []
        self.added: list[int] = []

    @classmethod
    def from_header(cls, match: re.Match) -> "_HunkBuilder":
        old_ln = int(match.group(1))
        old_count = int(match.group(2)) if match.group(2) is not None else 1
        new_ln = int(match.group(3))
        new_count = int(match.group(4)) if match.group(4) is not None else 1
        return cls(_start_position(old_ln, old_count), _start_position(new_ln, new_count))

    def add(self, line: str) -> None:
        if not line:
            tag, rest = " ", ""
        else:
            tag, rest = line[0], line[1:]

        if tag == " ":
            self.source.append(FuzzyLine(rest))
            self.target.append(FuzzyLine(rest))
        elif tag == "-":
            self.removed.append(self.old_position + len(self.source))
            self.source.append(FuzzyLine(rest))
        elif tag == "+":
            self.added.append(self.new_position + len(self.target))
            self.target.append(FuzzyLine(rest))
        elif tag == _NO_NEWLINE_MARKER:
            pass
        else:
            logger.debug("[UnifiedDiff] Ignoring line outside hunk grammar: %r", line)

    def has_lines(self) -> bool:
        return bool(self.source or self.target)

    def build(self) -> ChangeDelta[FuzzyLine]:
        return ChangeDelta(
            source=Chunk(self.old_position, self.source, self.removed),
            target=Chunk(self.new_position, self.target, self.added),
        )


def parse_unified_diff(text: str | Iterable[str]) -> Patch[FuzzyLine]:
    """Module-level convenience wrapper around :class:`UnifiedDiffParser`."""
    return UnifiedDiffParser().parse(text)
