"""Single-note terminal editor built around the embeddable widget."""

import errno
import logging
import os
import select
import signal
import sys
import tempfile
import termios
from typing import Optional

from .clipboard import ClipboardManager
from .constants import EditorConstants
from .cursor_store import CursorStore, get_cursor_store
from .keyboard import KeyboardHandler, KeyEvent, KeyType, MouseEvent
from .terminal import DEFAULT_THEME, TerminalInterface, Theme
from .widget import EditorWidget

logger = logging.getLogger(__name__)

HELP_LINES = [
    "",
    "FILE                           NAVIGATION",
    "  Ctrl-S     Save                Ctrl-←/→     Word left/right",
    "  Ctrl-Q     Save and quit       Home/Ctrl-A  Beginning of line",
    "  Esc        Save and quit       End/Ctrl-E   End of line",
    "  F1/Ctrl-H  Help                Ctrl-Home    Top of note",
    "                                 Ctrl-End     End of note",
    "EDITING                          PgUp/PgDn    Page up/down",
    "  Ctrl-K     Kill to line end",
    "  Ctrl-U     Kill to line start  MOUSE",
    "  Ctrl-W     Kill word back      Drag         Select and copy",
    "  Alt-Bksp   Kill word back      Middle       Paste killed text",
    "  Ctrl-Y     Yank                Wheel        Scroll",
]

TITLE_ROWS = 1
STATUS_ROWS = 1


class Editor:
    """Terminal application editing one note file."""

    def __init__(self, terminal: Optional[TerminalInterface] = None,
                 cursor_store: Optional[CursorStore] = None,
                 clipboard: Optional[ClipboardManager] = None,
                 theme: Theme = DEFAULT_THEME):
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.cursor_store = cursor_store if cursor_store is not None else get_cursor_store()
        self.clipboard = clipboard or ClipboardManager()
        self.theme = theme
        self.widget = EditorWidget(clipboard=self.clipboard.copy_primary)
        self.widget.set_placeholder(EditorConstants.PLACEHOLDER)
        self.widget.set_y_offset(TITLE_ROWS)
        self.widget.focus()
        self.running = False
        self.error_mode = False  # True when terminal is too small
        self._resize_pipe_r, self._resize_pipe_w = os.pipe()
        self.filename: Optional[str] = None
        self.status_message: Optional[str] = None
        self.prompt_mode: Optional[str] = None  # None, 'save_filename', 'save_filename_quit', 'quit_confirm'
        self.prompt_input = ""
        self.help_visible = False

    def _handle_resize(self, signum, frame):
        """Handle terminal resize signal."""
        del signum, frame  # Unused
        # Write to pipe to wake up select()
        os.write(self._resize_pipe_w, EditorConstants.RESIZE_PIPE_MARKER)

    def update_geometry(self) -> None:
        """Fit the widget between the title bar and the status line."""
        width = self.terminal.width
        height = self.terminal.height
        self.error_mode = (width < EditorConstants.MIN_TERMINAL_WIDTH
                           or height < EditorConstants.MIN_TERMINAL_HEIGHT)
        self.widget.set_width(width)
        self.widget.set_height(max(1, height - TITLE_ROWS - STATUS_ROWS))

    def run(self):
        """Run the main editor loop."""
        self.terminal.setup()
        self.running = True
        original_winch_handler = signal.signal(signal.SIGWINCH, self._handle_resize)

        try:
            with self.terminal.term.cbreak():
                # Let Ctrl-S and Ctrl-Q reach the editor instead of flow control
                old_settings = None
                try:
                    old_settings = termios.tcgetattr(sys.stdin)
                    new_settings = list(old_settings)
                    new_settings[0] &= ~(termios.IXON | termios.IXOFF)
                    termios.tcsetattr(sys.stdin, termios.TCSANOW, new_settings)
                except (termios.error, AttributeError, OSError):
                    old_settings = None

                need_draw = True
                while self.running:
                    if need_draw:
                        self.update_geometry()
                        self._draw()
                        need_draw = False

                    ready, _, _ = select.select([0, self._resize_pipe_r], [], [])

                    if self._resize_pipe_r in ready:
                        os.read(self._resize_pipe_r, 1024)
                        need_draw = True
                    elif 0 in ready:
                        event = self.keyboard.get_event(timeout=0)
                        if event is not None:
                            self.handle_event(event)
                            need_draw = True

                if old_settings:
                    try:
                        termios.tcsetattr(sys.stdin, termios.TCSANOW, old_settings)
                    except (termios.error, OSError):
                        pass

        except KeyboardInterrupt:
            # Ctrl-C leaves without saving, like closing the terminal
            pass
        finally:
            signal.signal(signal.SIGWINCH, original_winch_handler)
            os.close(self._resize_pipe_r)
            os.close(self._resize_pipe_w)
            self.terminal.cleanup()

    # --- Drawing ---
    def _title(self) -> str:
        name = os.path.basename(self.filename) if self.filename else "[new note]"
        marker = " *" if self.widget.dirty() else ""
        return f" {name}{marker}"

    def _status(self) -> str:
        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            return f" File to save in: {self.prompt_input}"
        if self.prompt_mode == 'quit_confirm':
            return " Save failed. Quit anyway? (y, n) "
        if self.status_message:
            return f" {self.status_message}"
        words = self.widget.model.count_words()
        return f" {words} words | F1 for help"

    def _draw(self):
        if self.error_mode:
            self.terminal.draw_error_message(
                EditorConstants.TERMINAL_TOO_SMALL_MESSAGE.format(
                    EditorConstants.MIN_TERMINAL_WIDTH, EditorConstants.MIN_TERMINAL_HEIGHT),
                EditorConstants.CURRENT_SIZE_MESSAGE.format(self.terminal.width, self.terminal.height),
            )
            return
        if self.help_visible:
            self.terminal.draw_help("JOTTER HELP", HELP_LINES)
            return
        frame = self.widget.render()
        self.terminal.draw_frame(frame, TITLE_ROWS, self.widget.width,
                                 title=self._title(), status=self._status(), theme=self.theme)

    # --- Input ---
    def handle_event(self, event):
        if isinstance(event, MouseEvent):
            if not (self.help_visible or self.prompt_mode or self.error_mode):
                self.widget.handle_mouse(event)
            return
        self._handle_key_event(event)

    def _handle_key_event(self, key_event: KeyEvent):
        """Handle a keyboard event."""
        # If help is visible, any key dismisses it
        if self.help_visible:
            self.help_visible = False
            return

        if self.status_message and not self.prompt_mode:
            self.status_message = None

        if self.prompt_mode in ('save_filename', 'save_filename_quit'):
            self._handle_filename_prompt(key_event)
            return
        if self.prompt_mode == 'quit_confirm':
            self._handle_quit_confirm(key_event)
            return

        if self._is_key(key_event, KeyType.SPECIAL, 'escape') and self.error_mode:
            self.running = False
            return
        if self.error_mode:
            return

        if self._is_key(key_event, KeyType.SPECIAL, 'f1') or self._is_key(key_event, KeyType.CTRL, 'h'):
            self.help_visible = True
            return
        if self._is_key(key_event, KeyType.CTRL, 's'):
            self._handle_save()
            return
        if self._is_key(key_event, KeyType.CTRL, 'q') or self._is_key(key_event, KeyType.SPECIAL, 'escape'):
            self._handle_quit()
            return

        self.widget.handle_key(key_event)

    @staticmethod
    def _is_key(key_event: KeyEvent, key_type: KeyType, value: str) -> bool:
        return key_event.key_type == key_type and key_event.value == value

    # --- Files ---
    def load_file(self, filename: str):
        """Load a note and put the cursor back where it was last left."""
        self.filename = filename
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            # New note - start with empty document
            content = ""
        self.widget.set_value(content)
        self.update_geometry()
        self.widget.set_cursor(self.cursor_store.load(filename))

    def save_file(self, filename: str) -> bool:
        """Save the note atomically and remember the cursor offset.

        Returns:
            True if save succeeded, False otherwise
        """
        temp_filename = None
        try:
            content = self.widget.value()
            # Temp file in the same directory so the rename stays on one filesystem
            dir_name = os.path.dirname(filename) or '.'
            with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=dir_name,
                                             prefix=EditorConstants.ATOMIC_SAVE_PREFIX,
                                             suffix=EditorConstants.ATOMIC_SAVE_SUFFIX,
                                             delete=False) as temp_file:
                temp_filename = temp_file.name
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            os.replace(temp_filename, filename)
            temp_filename = None

            self.filename = filename
            self.widget.clear_dirty()
            self.cursor_store.save(filename, self.widget.get_cursor())
            return True

        except OSError as e:
            if isinstance(e, PermissionError):
                self.status_message = f"Error: Permission denied saving {filename}"
            elif e.errno == errno.ENOSPC:
                self.status_message = "Error: No space left on device"
            else:
                self.status_message = f"Error: Cannot save to {filename}"
            logger.warning(f"Saving {filename} failed: {e}")
            return False
        finally:
            if temp_filename and os.path.exists(temp_filename):
                try:
                    os.remove(temp_filename)
                except OSError:
                    pass

    def _handle_save(self):
        """Handle Ctrl-S save command."""
        if self.filename:
            if self.save_file(self.filename):
                self.status_message = f"Saved to {self.filename}"
        else:
            self.prompt_mode = 'save_filename'
            self.prompt_input = ""

    def _handle_quit(self):
        """Save (when there is anything to save) and leave."""
        if not self.filename:
            if not self.widget.value():
                self.running = False
                return
            self.prompt_mode = 'save_filename_quit'
            self.prompt_input = ""
            return
        if self.save_file(self.filename):
            self.running = False
        else:
            self.prompt_mode = 'quit_confirm'

    def _handle_filename_prompt(self, key_event: KeyEvent):
        """Handle keypress during filename prompt."""
        if self._is_key(key_event, KeyType.SPECIAL, 'escape') or self._is_key(key_event, KeyType.CTRL, 'g'):
            self.prompt_mode = None
            self.prompt_input = ""
        elif self._is_key(key_event, KeyType.SPECIAL, 'enter'):
            if self.prompt_input:
                quitting = self.prompt_mode == 'save_filename_quit'
                filename = self.prompt_input
                self.prompt_mode = None
                self.prompt_input = ""
                if self.save_file(filename):
                    self.status_message = f"Saved to {filename}"
                    if quitting:
                        self.running = False
        elif self._is_key(key_event, KeyType.SPECIAL, 'backspace'):
            self.prompt_input = self.prompt_input[:-1]
        elif key_event.key_type == KeyType.REGULAR:
            if all(ord(ch) >= 32 for ch in key_event.value):
                self.prompt_input += key_event.value

    def _handle_quit_confirm(self, key_event: KeyEvent):
        """Handle keypress after a failed save-and-quit."""
        self.prompt_mode = None
        if key_event.key_type == KeyType.REGULAR and key_event.value.lower() == 'y':
            self.running = False
