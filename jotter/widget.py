"""Embeddable editor: one object wrapping model, view, selection and commands.

The caller owns the screen. It feeds key and mouse events in, asks for a
rendered ``Frame`` when it wants to draw, and reads the text and cursor
offset back out when it saves.
"""

import logging
from typing import Callable, Optional

from .commands import CommandRegistry
from .constants import EditorConstants
from .keyboard import KeyEvent, MouseAction, MouseButton, MouseEvent
from .model import TextModel
from .view import Frame, TerminalTextView

logger = logging.getLogger(__name__)


class EditorWidget:
    """A focusable, wrapping plain-text editor."""

    def __init__(
        self,
        width: int = EditorConstants.DEFAULT_WIDTH,
        height: int = EditorConstants.DEFAULT_HEIGHT,
        clipboard: Optional[Callable[[str], None]] = None,
    ):
        self.view = TerminalTextView(num_rows=height, num_columns=width)
        self.model = TextModel(self.view)
        self.commands = CommandRegistry()
        # Receives the text of each completed mouse selection
        self.clipboard = clipboard

    # --- Content ---
    def set_value(self, text: str) -> None:
        self.model.set_value(text)

    def value(self) -> str:
        return self.model.value()

    def set_cursor(self, offset: int) -> None:
        self.model.set_cursor(offset)

    def get_cursor(self) -> int:
        return self.model.get_cursor()

    @property
    def kill_buffer(self) -> str:
        return self.model.kill_buffer

    # --- Geometry ---
    def set_width(self, width: int) -> None:
        self.view.set_size(self.view.num_rows, width)

    def set_height(self, height: int) -> None:
        self.view.set_size(height, self.view.num_columns)

    def set_y_offset(self, y: int) -> None:
        self.view.y_offset = y

    @property
    def width(self) -> int:
        return self.view.num_columns

    @property
    def height(self) -> int:
        return self.view.num_rows

    # --- Focus ---
    @property
    def focused(self) -> bool:
        return self.view.focused

    def focus(self) -> None:
        self.view.focused = True

    def blur(self) -> None:
        self.view.focused = False

    def set_placeholder(self, text: str) -> None:
        self.view.placeholder = text

    # --- Dirty flag ---
    def dirty(self) -> bool:
        return self.model.dirty

    def mark_dirty(self) -> None:
        self.model.mark_dirty()

    def clear_dirty(self) -> None:
        self.model.clear_dirty()

    # --- Events ---
    def handle_key(self, key_event: KeyEvent) -> bool:
        """Apply one key. Returns True if the text changed."""
        if not self.focused:
            return False
        return self.commands.execute(self, key_event)

    def handle_mouse(self, event: MouseEvent) -> None:
        """Apply one mouse report (press, drag, release, wheel, middle click)."""
        if not self.focused:
            return
        model = self.model
        selection = model.selection

        if event.button == MouseButton.LEFT and event.action == MouseAction.PRESS:
            self._move_to_mouse(event)
            self.view.update_desired_col()
            selection.begin(model.get_cursor())

        elif event.action == MouseAction.MOTION and selection.dragging:
            self._move_to_mouse(event)
            self.view.update_desired_col()
            selection.extend(model.get_cursor())

        elif event.button == MouseButton.LEFT and event.action == MouseAction.RELEASE:
            if selection.release() and model.copy_selection():
                self._send_to_clipboard(model.kill_buffer)

        elif event.button in (MouseButton.WHEEL_UP, MouseButton.WHEEL_DOWN):
            if event.button == MouseButton.WHEEL_UP:
                self.view.scroll_up(EditorConstants.WHEEL_SCROLL_LINES)
            else:
                self.view.scroll_down(EditorConstants.WHEEL_SCROLL_LINES)
            if selection.dragging:
                # Keep extending the selection under the pointer
                self._move_to_mouse(event)
                selection.extend(model.get_cursor())

        elif event.button == MouseButton.MIDDLE and event.action == MouseAction.PRESS:
            self._move_to_mouse(event)
            self.view.update_desired_col()
            selection.clear()
            model.yank()

    def _move_to_mouse(self, event: MouseEvent) -> None:
        self.model.cursor_position = self.view.mouse_to_position(event.x, event.y)
        self.model.clamp_cursor()

    def _send_to_clipboard(self, text: str) -> None:
        if self.clipboard is None:
            return
        try:
            self.clipboard(text)
        except OSError as e:
            logger.warning(f"Could not copy selection: {e}")

    # --- Output ---
    def render(self) -> Frame:
        return self.view.render()
