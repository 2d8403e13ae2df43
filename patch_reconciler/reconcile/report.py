"""
Changed-lines report — shows the model which parts of a file a patch
actually touched, with line numbers, after fuzzy application.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..diffing.line_diff import diff_lines

REPORT_PREFIX = "Here are the affected portions of the file after the patch is applied:\n"
MIN_CONTEXT_LINES = 3


@dataclass
class AffectedRange:
    """1-based inclusive line span of the patched file, with context."""
    start_line: int
    end_line: int
    changed_lines: tuple[int, ...] = ()

    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


def affected_ranges(
    original_lines: Sequence[str],
    patched_lines: Sequence[str],
) -> list[AffectedRange]:
    """Changed spans of *patched_lines*, padded with context and merged.

    Each delta gets ``max(3, changed // 10)`` lines of context on both
    sides; overlapping or touching spans are merged.
    """
    deltas = sorted(diff_lines(original_lines, patched_lines).deltas, key=lambda d: d.target.position)

    spans: list[list] = []
    for delta in deltas:
        target = delta.target
        context = max(MIN_CONTEXT_LINES, target.size() // 10)
        start = max(0, target.position - context)
        end = min(len(patched_lines), target.position + target.size() + context)
        if start >= end:
            continue
        changed = list(range(target.position + 1, target.position + target.size() + 1))
        if spans and start <= spans[-1][1]:
            spans[-1][1] = max(spans[-1][1], end)
            spans[-1][2].extend(changed)
        else:
            spans.append([start, end, changed])

    return [AffectedRange(start + 1, end, tuple(changed)) for start, end, changed in spans]


def render_range(file_name: str, lines: Sequence[str], affected: AffectedRange) -> str:
    """One fenced block with right-aligned ``N: `` line-number prefixes."""
    width = len(str(affected.end_line))
    body = "\n".join(
        f"{number:{width}d}: {lines[number - 1]}"
        for number in range(affected.start_line, affected.end_line + 1)
    )
    return f"```{file_name} lines {affected.start_line} to {affected.end_line}\n{body}\n```\n"


def changed_lines_report(
    file_name: str,
    original_lines: Sequence[str],
    patched_lines: Sequence[str],
) -> str:
    ranges = affected_ranges(original_lines, patched_lines)
    return REPORT_PREFIX + "\n".join(
        render_range(file_name, patched_lines, affected) for affected in ranges
    )
