"""
Line diff — computes a :class:`Patch` between two line lists and renders
unified diff previews.
"""

from __future__ import annotations

import difflib
from typing import Sequence

from .patch import ChangeDelta, Chunk, Patch


def diff_lines(original: Sequence[str], revised: Sequence[str]) -> Patch[str]:
    """Minimal-ish line diff of *original* against *revised*.

    Positions are 0-based indices into the given lists and every line of
    each delta counts as changed (no context is attached), so
    ``diff_lines(a, b).apply_to(a) == list(b)``.
    """
    matcher = difflib.SequenceMatcher(a=list(original), b=list(revised), autojunk=False)
    patch: Patch[str] = Patch()
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        patch.add_delta(ChangeDelta(
            source=Chunk(i1, list(original[i1:i2]), list(range(i1, i2))),
            target=Chunk(j1, list(revised[j1:j2]), list(range(j1, j2))),
        ))
    return patch


def unified_diff_text(
    original_text: str,
    revised_text: str,
    file_name: str = "file",
    context: int = 3,
) -> str | None:
    """Unified diff between two texts, or None when they are identical."""
    if original_text == revised_text:
        return None

    diff = difflib.unified_diff(
        original_text.splitlines(keepends=True),
        revised_text.splitlines(keepends=True),
        fromfile=f"a/{file_name}",
        tofile=f"b/{file_name}",
        n=context,
        lineterm="",
    )
    diff_text = "".join(
        line if line.endswith(("\n", "\r")) else line + "\n" for line in diff
    )
    return diff_text if diff_text.strip() else None
