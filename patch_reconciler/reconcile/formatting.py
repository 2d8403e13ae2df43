"""
Replacement formatting — re-indents replacement text to the depth of the
line it lands on.

Best effort only: :func:`reformat_to_indent` never raises, it hands back
the unformatted text with a warning instead.
"""

from __future__ import annotations

import logging

from .changes import FormattedText

logger = logging.getLogger(__name__)


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


def visual_column(prefix: str, tab_width: int = 4) -> int:
    """Display column reached after *prefix*, with tab stops every *tab_width*."""
    if tab_width <= 0:
        raise ValueError(f"tab_width must be positive, got {tab_width}")
    column = 0
    for ch in prefix:
        if ch == "\t":
            column += tab_width - column % tab_width
        else:
            column += 1
    return column


def indent_depth(line: str, indent_width: int = 4, tab_width: int = 4) -> int:
    """Indentation level of *line* in units of *indent_width* columns."""
    if indent_width <= 0:
        raise ValueError(f"indent_width must be positive, got {indent_width}")
    return visual_column(leading_whitespace(line), tab_width) // indent_width


def remove_common_indentation(text: str) -> str:
    """Strip the indentation shared by every non-blank line."""
    if not text:
        return text
    lines = text.split("\n")
    indents = [
        len(line) - len(line.lstrip())
        for line in lines
        if line.strip()
    ]
    common = min(indents, default=0)
    if common == 0:
        return text
    return "\n".join(line[common:] if len(line) >= common else line for line in lines)


def _render_indent(columns: int, use_tabs: bool, tab_width: int) -> str:
    columns = max(0, columns)
    if use_tabs:
        return "\t" * (columns // tab_width) + " " * (columns % tab_width)
    return " " * columns


def reformat_to_indent(
    replacement: str,
    target_line: str,
    indent_width: int = 4,
    tab_width: int = 4,
    use_tabs: bool = False,
    indent_first_line: bool = False,
) -> FormattedText:
    """Re-indent *replacement* to match *target_line*'s depth.

    Parameters
    ----------
    replacement:
        Text about to be inserted.
    target_line:
        The full document line where the replacement starts.
    indent_first_line:
        Whether the first replacement line starts at column 0 of the
        target line (otherwise the line keeps its existing indentation).

    Returns
    -------
    FormattedText
        ``formatted`` is False and ``warning`` is set if anything failed.
    """
    try:
        base = indent_depth(target_line, indent_width, tab_width) * indent_width

        if indent_first_line:
            lines = remove_common_indentation(replacement).split("\n")
            columns = [visual_column(leading_whitespace(line), tab_width) for line in lines]
            common = 0
        else:
            # The first line sits after the target line's own indentation,
            # so it is column 0 of the replacement's frame.
            lines = replacement.split("\n")
            columns = [0]
            columns += [visual_column(leading_whitespace(line), tab_width) for line in lines[1:]]
            common = min(
                (col for col, line in zip(columns, lines) if line.strip()),
                default=0,
            )

        out: list[str] = []
        for i, (line, column) in enumerate(zip(lines, columns)):
            if not line.strip():
                out.append("")
            elif i == 0 and not indent_first_line:
                out.append(line)
            else:
                out.append(_render_indent(base + column - common, use_tabs, tab_width) + line.lstrip(" \t"))
        return FormattedText("\n".join(out), True)
    except Exception as exc:
        warning = f"Replacement could not be reformatted, using it as given: {exc}"
        logger.warning("[Format] %s", warning)
        return FormattedText(replacement, False, warning)
