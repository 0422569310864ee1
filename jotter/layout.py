"""Visual layout: mapping logical (row, column) positions to wrapped rows.

Every function here is pure. A logical line of length L wrapped at width W
occupies max(1, ceil(L / W)) visual rows; an empty line still occupies one.
Wrapping is a hard character wrap, not a word wrap, so the column of a
character within its visual row is simply ``col % W``.
"""

from .constants import EditorConstants


def count_visual_lines(line: str, width: int) -> int:
    """Return how many visual rows a logical line occupies at ``width``."""
    if width <= 0:
        return 1
    if not line:
        return 1
    return (len(line) + width - 1) // width


def movement_width(width: int) -> int:
    """Width used for vertical movement math; degenerate widths fall back."""
    if width <= 0:
        return EditorConstants.FALLBACK_WRAP_WIDTH
    return width


def logical_to_visual(lines: list[str], row: int, col: int, width: int) -> int:
    """Convert a logical position to a global visual row index.

    The result counts the visual rows of all preceding lines, plus
    ``col // width`` inside the current line. A cursor sitting right after
    the last character of a line whose length is an exact multiple of the
    width therefore lands on the row below that line's text.
    """
    visual = 0
    for i in range(min(row, len(lines))):
        visual += count_visual_lines(lines[i], width)
    if width > 0 and col > 0:
        visual += col // width
    return visual


def visual_to_logical(lines: list[str], visual_row: int, width: int) -> tuple[int, int]:
    """Convert a global visual row to (logical_row, visual_offset_in_line).

    Rows before the document map to (0, 0); rows past the end clamp to the
    start of the last logical line.
    """
    if visual_row <= 0:
        return (0, 0)
    visual = 0
    for i, line in enumerate(lines):
        count = count_visual_lines(line, width)
        if visual + count > visual_row:
            return (i, visual_row - visual)
        visual += count
    if lines:
        return (len(lines) - 1, 0)
    return (0, 0)


def total_visual_rows(lines: list[str], width: int) -> int:
    """Return the number of visual rows the whole document occupies."""
    return sum(count_visual_lines(line, width) for line in lines)


def max_viewport_row(lines: list[str], width: int, height: int) -> int:
    """Largest valid top row for a window of ``height`` rows."""
    return max(0, total_visual_rows(lines, width) - height)


def visual_segments(line: str, width: int) -> list[tuple[int, int]]:
    """Split a logical line into (start_col, end_col) slices, one per visual row.

    An empty line yields a single empty slice. With a degenerate width the
    whole line is one slice.
    """
    if width <= 0 or not line:
        return [(0, len(line))]
    segments = []
    for v in range(count_visual_lines(line, width)):
        start = v * width
        segments.append((start, min(start + width, len(line))))
    return segments
