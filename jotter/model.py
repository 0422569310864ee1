from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from .selection import Selection


@dataclass
class CursorPosition:
    row: int = 0
    col: int = 0

    def __lt__(self, other):
        if self.row != other.row:
            return self.row < other.row
        return self.col < other.col

    def __ge__(self, other):
        return not self < other


def is_word_char(ch: str) -> bool:
    """ASCII letters, digits and underscore make up words."""
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ('0' <= ch <= '9') or ch == '_'


class TextView(ABC):
    _model: "Optional[TextModel]" = None

    @property
    def model(self):
        assert self._model
        return self._model

    @abstractmethod
    def ensure_cursor_visible(self):
        """Scroll so the cursor's visual row is inside the window."""

    @abstractmethod
    def update_desired_col(self):
        """Remember the cursor's visual column for later vertical moves."""

    @abstractmethod
    def reset_viewport(self):
        """Scroll back to the top of the document."""


class TextModel:
    """Line buffer, cursor, selection anchor and kill buffer.

    Lines never contain a newline and there is always at least one line.
    Every mutating method leaves the cursor clamped and visible.
    """

    lines: list[str]
    cursor_position: CursorPosition
    view: TextView

    def __init__(self, view: TextView, lines: Optional[list[str]] = None):
        self.view = view
        self.view._model = self
        self.lines = list(lines) if lines else [""]
        self.cursor_position = CursorPosition()
        self.selection = Selection()
        self.kill_buffer = ""  # Last killed or mouse-selected text
        self.kill_forward = False  # kill_buffer came from Ctrl-K
        self.dirty = False

    # --- Content ---
    def value(self) -> str:
        return '\n'.join(self.lines)

    def set_value(self, text: str):
        """Replace the whole buffer, resetting cursor, viewport and selection."""
        self.lines = text.split('\n') if text else [""]
        self.cursor_position = CursorPosition()
        self.selection.clear()
        self.dirty = False
        self.view.reset_viewport()
        self.view.update_desired_col()

    def mark_dirty(self):
        self.dirty = True

    def clear_dirty(self):
        self.dirty = False

    # --- Offsets ---
    def get_cursor(self) -> int:
        """Return the cursor as an absolute character offset."""
        pos = 0
        for i in range(min(self.cursor_position.row, len(self.lines))):
            pos += len(self.lines[i]) + 1  # +1 for the line break
        return pos + self.cursor_position.col

    def offset_to_position(self, offset: int) -> CursorPosition:
        """Convert an absolute offset to (row, col), clamping to the document."""
        if offset < 0:
            offset = 0
        char_count = 0
        for row, line in enumerate(self.lines):
            if char_count + len(line) >= offset:
                return CursorPosition(row, offset - char_count)
            char_count += len(line) + 1
        last = len(self.lines) - 1
        return CursorPosition(last, len(self.lines[last]))

    def set_cursor(self, offset: int):
        self.cursor_position = self.offset_to_position(offset)
        self.view.update_desired_col()
        self.view.ensure_cursor_visible()

    def clamp_cursor(self):
        """Pull the cursor back inside the buffer."""
        row = min(max(self.cursor_position.row, 0), len(self.lines) - 1)
        col = min(max(self.cursor_position.col, 0), len(self.lines[row]))
        self.cursor_position.row = row
        self.cursor_position.col = col

    def current_line(self) -> str:
        return self.lines[self.cursor_position.row]

    # --- Insertion ---
    def insert_char(self, ch: str):
        """Insert a single character at the cursor."""
        if ch in ('\n', '\r'):
            self.insert_newline()
            return
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        self.lines[row] = line[:col] + ch + line[col:]
        self.cursor_position.col = col + 1
        self._after_edit()

    def insert_newline(self):
        """Split the current line at the cursor."""
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        self.lines[row:row + 1] = [line[:col], line[col:]]
        self.cursor_position = CursorPosition(row + 1, 0)
        self._after_edit()

    def insert_text(self, text: str):
        """Insert text at the cursor; each newline becomes a line split."""
        if not text:
            return
        parts = text.split('\n')
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        before_cursor = line[:col]
        after_cursor = line[col:]
        parts[0] = before_cursor + parts[0]
        last_len = len(parts[-1])
        parts[-1] += after_cursor
        self.lines[row:row + 1] = parts
        self.cursor_position = CursorPosition(row + len(parts) - 1, last_len)
        self._after_edit()

    # --- Character deletion ---
    def delete_backward(self):
        """Backspace: delete the character before the cursor."""
        if self.cursor_position.col > 0:
            row = self.cursor_position.row
            col = self.cursor_position.col
            line = self.lines[row]
            self.lines[row] = line[:col - 1] + line[col:]
            self.cursor_position.col = col - 1
            self._after_edit()
        elif self._join_with_previous_line():
            self._after_edit()
        else:
            self.view.update_desired_col()

    def delete_forward(self):
        """Delete the character under the cursor."""
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        if col < len(line):
            self.lines[row] = line[:col] + line[col + 1:]
            self._after_edit()
        elif self._join_with_next_line():
            self._after_edit()
        else:
            self.view.update_desired_col()

    def delete_range(self, start: int, end: int):
        """Remove the [start, end) span of the flattened text."""
        if start > end:
            start, end = end, start
        text = self.value()
        start = min(max(start, 0), len(text))
        end = min(max(end, 0), len(text))
        if start == end:
            self.cursor_position = self.offset_to_position(start)
            self.view.update_desired_col()
            self.view.ensure_cursor_visible()
            return
        new_text = text[:start] + text[end:]
        self.lines = new_text.split('\n')
        self.cursor_position = self.offset_to_position(start)
        self._after_edit()

    def _join_with_previous_line(self) -> bool:
        """Merge the current line into the previous one, cursor at the join."""
        row = self.cursor_position.row
        if row == 0:
            return False
        prev_line = self.lines[row - 1]
        self.lines[row - 1] = prev_line + self.lines[row]
        del self.lines[row]
        self.cursor_position = CursorPosition(row - 1, len(prev_line))
        return True

    def _join_with_next_line(self) -> bool:
        """Merge the next line into the current one, cursor unchanged."""
        row = self.cursor_position.row
        if row + 1 >= len(self.lines):
            return False
        self.lines[row] = self.lines[row] + self.lines[row + 1]
        del self.lines[row + 1]
        return True

    def _after_edit(self):
        self.clamp_cursor()
        self.dirty = True
        self.view.update_desired_col()
        self.view.ensure_cursor_visible()

    def _after_move(self):
        self.view.update_desired_col()
        self.view.ensure_cursor_visible()

    # --- Horizontal movement ---
    def left_char(self):
        if self.cursor_position.col > 0:
            self.cursor_position.col -= 1
        elif self.cursor_position.row > 0:
            self.cursor_position.row -= 1
            self.cursor_position.col = len(self.current_line())
        self._after_move()

    def right_char(self):
        if self.cursor_position.col < len(self.current_line()):
            self.cursor_position.col += 1
        elif self.cursor_position.row + 1 < len(self.lines):
            self.cursor_position.row += 1
            self.cursor_position.col = 0
        self._after_move()

    def move_beginning_of_line(self):
        self.cursor_position.col = 0
        self._after_move()

    def move_end_of_line(self):
        self.cursor_position.col = len(self.current_line())
        self._after_move()

    def move_to_top(self):
        self.cursor_position = CursorPosition(0, 0)
        self._after_move()

    def move_to_bottom(self):
        last = len(self.lines) - 1
        self.cursor_position = CursorPosition(last, len(self.lines[last]))
        self._after_move()

    # --- Word movement ---
    def right_word(self):
        """Jump to the start of the next word, possibly onto the next line."""
        line = self.current_line()
        pos = self.cursor_position.col
        while pos < len(line) and is_word_char(line[pos]):
            pos += 1
        while pos < len(line) and not is_word_char(line[pos]):
            pos += 1
        self.cursor_position.col = pos
        if pos >= len(line) and self.cursor_position.row + 1 < len(self.lines):
            self.cursor_position.row += 1
            self.cursor_position.col = 0
        self._after_move()

    def left_word(self):
        """Jump to the start of the previous word, possibly on the previous line."""
        if self.cursor_position.col == 0:
            if self.cursor_position.row > 0:
                self.cursor_position.row -= 1
                line = self.current_line()
                pos = len(line)
                while pos > 0 and not is_word_char(line[pos - 1]):
                    pos -= 1
                while pos > 0 and is_word_char(line[pos - 1]):
                    pos -= 1
                self.cursor_position.col = pos
            self._after_move()
            return

        line = self.current_line()
        pos = self.cursor_position.col - 1
        while pos > 0 and not is_word_char(line[pos]):
            pos -= 1
        while pos > 0 and is_word_char(line[pos - 1]):
            pos -= 1
        self.cursor_position.col = pos
        self._after_move()

    # --- Kill ring ---
    def kill_line(self):
        """Delete from the cursor to the end of the line (Ctrl-K).

        At the end of a line the line break itself is killed, joining the
        next line onto this one.
        """
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        if col < len(line):
            self.kill_buffer = line[col:]
            self.kill_forward = True
            self.lines[row] = line[:col]
            self._after_edit()
        elif self._join_with_next_line():
            self.kill_buffer = "\n"
            self.kill_forward = True
            self._after_edit()
        else:
            self._after_move()

    def kill_line_backward(self):
        """Delete from the start of the line to the cursor (Ctrl-U).

        At the start of a line the preceding line break is killed instead.
        """
        row = self.cursor_position.row
        col = self.cursor_position.col
        line = self.lines[row]
        if col > 0:
            self.kill_buffer = line[:col]
            self.kill_forward = False
            self.lines[row] = line[col:]
            self.cursor_position.col = 0
            self._after_edit()
        elif self._join_with_previous_line():
            self.kill_buffer = "\n"
            self.kill_forward = False
            self._after_edit()
        else:
            self._after_move()

    def backward_kill_word(self):
        """Delete the word before the cursor (Ctrl-W, Alt-Backspace)."""
        if self.cursor_position.col == 0:
            self.delete_backward()
            return

        row = self.cursor_position.row
        line = self.lines[row]
        original_pos = self.cursor_position.col
        pos = original_pos
        while pos > 0 and not is_word_char(line[pos - 1]):
            pos -= 1
        while pos > 0 and is_word_char(line[pos - 1]):
            pos -= 1

        self.kill_buffer = line[pos:original_pos]
        self.kill_forward = False
        self.lines[row] = line[:pos] + line[original_pos:]
        self.cursor_position.col = pos
        self._after_edit()

    def yank(self):
        """Insert the kill buffer at the cursor (Ctrl-Y).

        Text killed forward with Ctrl-K is put back in front of the cursor,
        so kill followed by yank leaves both text and cursor unchanged.
        Anything else leaves the cursor after the inserted text.
        """
        if not self.kill_buffer:
            return
        start = CursorPosition(self.cursor_position.row, self.cursor_position.col)
        self.insert_text(self.kill_buffer)
        if self.kill_forward:
            self.cursor_position = start
            self._after_move()

    # --- Selection ---
    def selection_range(self) -> Optional[tuple[int, int]]:
        return self.selection.range(self.get_cursor())

    def get_selected_text(self) -> str:
        """Get the currently selected text."""
        sel = self.selection_range()
        if sel is None:
            return ""
        text = self.value()
        return text[sel[0]:sel[1]]

    def delete_selection(self):
        """Delete the currently selected text, cursor to its start."""
        sel = self.selection_range()
        self.selection.clear()
        if sel is None:
            return
        self.delete_range(sel[0], sel[1])

    def copy_selection(self) -> bool:
        """Copy selected text into the kill buffer."""
        selected = self.get_selected_text()
        if selected:
            self.kill_buffer = selected
            self.kill_forward = False
            return True
        return False

    def count_words(self) -> int:
        """Count whitespace-separated words in the document."""
        return sum(len(line.split()) for line in self.lines)
