"""Visual selection extraction for sending code to the CLI."""

from __future__ import annotations

from collections.abc import Sequence


def extract_selection(
    lines: Sequence[str],
    start_line: int,
    start_col: int,
    end_line: int,
    end_col: int,
) -> str | None:
    """Cut the selected text out of a buffer.

    Lines and columns are 1-based and inclusive, as editors report marks.
    A single-line selection is cut column-wise. For a multi-line selection
    only the first line's head and the last line's tail are trimmed. Columns
    past the end of a line leave that line whole.

    Returns:
        The selected text, or None if there is no valid selection.
    """
    if start_line <= 0 or end_line < start_line:
        return None

    selected = list(lines[start_line - 1:end_line])
    if not selected:
        return ""

    if len(selected) == 1:
        text = selected[0]
        start_idx = start_col - 1
        end_idx = min(end_col, len(text))
        if start_idx < len(text):
            selected[0] = text[start_idx:end_idx]
    else:
        first = selected[0]
        if start_col <= len(first):
            selected[0] = first[start_col - 1:]
        last = selected[-1]
        if end_col <= len(last):
            selected[-1] = last[:end_col]

    return "\n".join(selected)


def compose_send_text(selection: str | None, args: str = "") -> str:
    """Join a selection with the user's extra text."""
    if selection is None:
        return args
    return f"{selection} {args}"
