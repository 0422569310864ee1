from dataclasses import dataclass, field
from typing import Optional

from .model import TextView, CursorPosition
from .constants import EditorConstants
from .layout import (
    count_visual_lines,
    logical_to_visual,
    max_viewport_row,
    movement_width,
    visual_segments,
    visual_to_logical,
)


@dataclass
class Frame:
    """One rendered screenful.

    ``lines`` always has exactly ``num_rows`` entries of raw text. The cursor
    cell and the selection are reported separately so the caller decides how
    to highlight them; the text itself carries no styling.
    """
    lines: list[str]
    cursor: Optional[tuple[int, int]] = None  # (y, x) within the frame
    selection_ranges: list[Optional[tuple[int, int]]] = field(default_factory=list)
    placeholder: bool = False  # lines[0] holds placeholder text


class TerminalTextView(TextView):
    num_rows: int = EditorConstants.DEFAULT_HEIGHT
    num_columns: int = EditorConstants.DEFAULT_WIDTH
    viewport_row: int = 0  # Top visible row, in visual-row space
    y_offset: int = 0  # Screen row where the view is drawn (mouse mapping)
    desired_col: int = 0  # Sticky visual column for up/down navigation
    focused: bool = False
    placeholder: str = ""

    def __init__(self, num_rows: Optional[int] = None, num_columns: Optional[int] = None):
        if num_rows is not None:
            self.num_rows = num_rows
        if num_columns is not None:
            self.num_columns = num_columns
        self.lines: list[str] = []
        self.visual_cursor_y: Optional[int] = None
        self.visual_cursor_x: Optional[int] = None
        self.selection_ranges: list[Optional[tuple[int, int]]] = []

    # --- Geometry ---
    def set_size(self, num_rows: int, num_columns: int) -> None:
        """Apply new geometry and restore the visibility invariant."""
        self.num_rows = num_rows
        self.num_columns = num_columns
        if self._model is not None:
            self.ensure_cursor_visible()

    def reset_viewport(self):
        self.viewport_row = 0

    def cursor_visual_row(self) -> int:
        pos = self.model.cursor_position
        return logical_to_visual(self.model.lines, pos.row, pos.col, self.num_columns)

    def ensure_cursor_visible(self):
        """Scroll the minimum amount needed to show the cursor's row."""
        height = max(1, self.num_rows)
        cursor_visual = self.cursor_visual_row()
        if cursor_visual >= self.viewport_row + height:
            self.viewport_row = cursor_visual - height + 1
        if cursor_visual < self.viewport_row:
            self.viewport_row = cursor_visual

    def update_desired_col(self):
        """Update the desired column from the current cursor position."""
        col = self.model.cursor_position.col
        self.desired_col = col % movement_width(self.num_columns)

    def _clamp_viewport(self):
        top = max_viewport_row(self.model.lines, self.num_columns, self.num_rows)
        self.viewport_row = min(max(self.viewport_row, 0), top)

    # --- Vertical movement ---
    def _visual_line_up(self, row: int, col: int) -> tuple[int, int]:
        """Position one visual row above (row, col), using desired_col."""
        width = movement_width(self.num_columns)
        lines = self.model.lines

        current_visual = col // width
        if current_visual > 0:
            new_col = (current_visual - 1) * width + self.desired_col
            return (row, min(new_col, len(lines[row])))

        if row == 0:
            return (0, 0)

        prev_line = lines[row - 1]
        last_visual = count_visual_lines(prev_line, width) - 1
        new_col = last_visual * width + self.desired_col
        return (row - 1, min(new_col, len(prev_line)))

    def _visual_line_down(self, row: int, col: int) -> tuple[int, int]:
        """Position one visual row below (row, col), using desired_col."""
        width = movement_width(self.num_columns)
        lines = self.model.lines
        line = lines[row]

        current_visual = col // width
        if current_visual < count_visual_lines(line, width) - 1:
            new_col = (current_visual + 1) * width + self.desired_col
            return (row, min(new_col, len(line)))

        if row == len(lines) - 1:
            return (row, len(line))

        next_line = lines[row + 1]
        return (row + 1, min(self.desired_col, len(next_line)))

    def _apply_vertical_move(self, row: int, col: int):
        pos = self.model.cursor_position
        pos.row = row
        pos.col = col
        # Landing on a clamped line end re-anchors the sticky column there
        width = movement_width(self.num_columns)
        if col % width != self.desired_col and col == len(self.model.lines[row]):
            self.update_desired_col()
        self.ensure_cursor_visible()

    def move_cursor_up(self):
        """Move cursor up one visual line, maintaining desired column."""
        pos = self.model.cursor_position
        self._apply_vertical_move(*self._visual_line_up(pos.row, pos.col))

    def move_cursor_down(self):
        """Move cursor down one visual line, maintaining desired column."""
        pos = self.model.cursor_position
        self._apply_vertical_move(*self._visual_line_down(pos.row, pos.col))

    # --- Paging and scrolling ---
    def scroll_page_up(self) -> None:
        self.viewport_row = max(0, self.viewport_row - self.num_rows)
        self._step_cursor(self._visual_line_up, self.num_rows)

    def scroll_page_down(self) -> None:
        self.viewport_row += self.num_rows
        self._clamp_viewport()
        self._step_cursor(self._visual_line_down, self.num_rows)

    def _step_cursor(self, step, times: int) -> None:
        pos = self.model.cursor_position
        for _ in range(max(0, times)):
            new_row, new_col = step(pos.row, pos.col)
            if (new_row, new_col) == (pos.row, pos.col):
                break
            pos.row = new_row
            pos.col = new_col
        self.model.clamp_cursor()
        self.ensure_cursor_visible()

    def scroll_up(self, n: int = EditorConstants.WHEEL_SCROLL_LINES) -> None:
        """Scroll the window up without moving the cursor."""
        self.viewport_row = max(0, self.viewport_row - n)

    def scroll_down(self, n: int = EditorConstants.WHEEL_SCROLL_LINES) -> None:
        """Scroll the window down without moving the cursor."""
        self.viewport_row += n
        self._clamp_viewport()

    # --- Mouse mapping ---
    def mouse_to_position(self, mouse_x: int, mouse_y: int) -> CursorPosition:
        """Convert terminal mouse coordinates to a clamped buffer position."""
        editor_y = mouse_y - self.y_offset
        editor_y = min(max(editor_y, 0), max(0, self.num_rows - 1))

        global_visual = self.viewport_row + editor_y
        lines = self.model.lines
        row, visual_offset = visual_to_logical(lines, global_visual, self.num_columns)

        col = visual_offset * max(self.num_columns, 0) + mouse_x
        col = min(max(col, 0), len(lines[row]))
        return CursorPosition(row, col)

    # --- Projection ---
    def render(self) -> Frame:
        """Project the buffer into exactly ``num_rows`` rows.

        Rows start at ``viewport_row`` in visual-row space. When the cursor
        sits after a line that exactly fills its last row, it belongs to the
        row below that text, so an extra row holding only the cursor is
        emitted there.
        """
        model = self.model
        height = max(0, self.num_rows)
        width = self.num_columns

        if model.lines == [""] and not self.focused and self.placeholder:
            self.lines = [self.placeholder[:max(width, 0)]] + [""] * (height - 1) if height else []
            self.visual_cursor_y = None
            self.visual_cursor_x = None
            self.selection_ranges = [None] * height
            return Frame(list(self.lines), None, list(self.selection_ranges), placeholder=True)

        cursor = model.cursor_position
        sel = model.selection_range()
        sel_start = model.offset_to_position(sel[0]) if sel else None
        sel_end = model.offset_to_position(sel[1]) if sel else None

        start_row, start_offset = visual_to_logical(model.lines, self.viewport_row, width)
        rows: list[str] = []
        ranges: list[Optional[tuple[int, int]]] = []
        self.visual_cursor_y = None
        self.visual_cursor_x = None

        if self._cursor_on_extra_row() and self.cursor_visual_row() == self.viewport_row and height:
            # Window starts exactly on the cursor-only row
            self.visual_cursor_y = 0
            self.visual_cursor_x = 0
            rows.append("")
            ranges.append(None)
            start_row, start_offset = cursor.row + 1, 0

        row = start_row
        while row < len(model.lines) and len(rows) < height:
            line = model.lines[row]
            segments = visual_segments(line, width)
            first = start_offset if row == start_row else 0
            for v in range(first, len(segments)):
                if len(rows) >= height:
                    break
                seg_start, seg_end = segments[v]
                segment = line[seg_start:seg_end]
                if width <= 0:
                    segment = ""
                is_last = v == len(segments) - 1
                ranges.append(self._segment_selection(row, seg_start, segment, is_last, sel_start, sel_end))
                if self.focused and row == cursor.row and seg_start <= cursor.col:
                    local = cursor.col - seg_start
                    if local < len(segment) or (is_last and local == len(segment) and (width <= 0 or local < width)):
                        self.visual_cursor_y = len(rows)
                        self.visual_cursor_x = local
                rows.append(segment)

            if row == cursor.row and self._cursor_on_extra_row() and len(rows) < height:
                self.visual_cursor_y = len(rows)
                self.visual_cursor_x = 0
                rows.append("")
                ranges.append(None)
            row += 1

        while len(rows) < height:
            rows.append("")
            ranges.append(None)

        self.lines = rows
        self.selection_ranges = ranges
        frame_cursor = None
        if self.visual_cursor_y is not None and self.visual_cursor_x is not None:
            frame_cursor = (self.visual_cursor_y, self.visual_cursor_x)
        return Frame(list(rows), frame_cursor, list(ranges))

    def _cursor_on_extra_row(self) -> bool:
        """True when the cursor follows a line that exactly fills its last row."""
        if not self.focused or self.num_columns <= 0:
            return False
        pos = self.model.cursor_position
        line = self.model.lines[pos.row]
        return bool(line) and pos.col == len(line) and len(line) % self.num_columns == 0

    def _segment_selection(
        self,
        row: int,
        seg_start: int,
        segment: str,
        is_last: bool,
        sel_start: Optional[CursorPosition],
        sel_end: Optional[CursorPosition],
    ) -> Optional[tuple[int, int]]:
        """Selection columns within one visual row, or None.

        A selected line break shows as one highlighted cell after the text
        when the row has room for it.
        """
        if sel_start is None or sel_end is None:
            return None
        if row < sel_start.row or row > sel_end.row:
            return None

        start = 0
        end = len(segment)
        if row == sel_start.row:
            start = max(0, sel_start.col - seg_start)
        if row == sel_end.row:
            end = min(len(segment), sel_end.col - seg_start)
        elif is_last and (self.num_columns <= 0 or len(segment) < self.num_columns):
            end = len(segment) + 1

        if start < end:
            return (start, end)
        return None
