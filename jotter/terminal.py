"""Terminal interface using Blessed for display and Curtsies for input."""

import re
import select
import sys
from collections import deque
from dataclasses import dataclass
from typing import Optional

import blessed

from .keyboard import SGR_MOUSE_RE
from .view import Frame

# Button-event tracking (drag reports) in SGR extended coordinates
MOUSE_ON = "\x1b[?1002h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1006l\x1b[?1002l"

# A partial SGR mouse report, as it may arrive one token at a time
SGR_MOUSE_PREFIX_RE = re.compile(r'\x1b(\[(<[\d;]*)?)?')

# Seconds to wait for the rest of a split escape sequence
ESCAPE_DELAY = 0.05


@dataclass(frozen=True)
class Theme:
    """Blessed attribute names used when drawing a frame."""
    cursor: str = "reverse"
    selection: str = "reverse"
    placeholder: str = "dim"
    title: str = "bold"
    status: str = "normal"


DEFAULT_THEME = Theme()


class TerminalInterface:
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None
        self._curtsies_active: bool = False
        self._pending: deque = deque()

    def setup(self):
        """Enter fullscreen mode, enable mouse reporting and prepare input."""
        print(self.term.enter_fullscreen, end='')
        print(self.term.hide_cursor, end='')
        print(self.term.clear, end='')
        print(MOUSE_ON, end='', flush=True)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            try:
                from curtsies import Input  # type: ignore
                self._curtsies_input = Input(keynames='curtsies')  # type: ignore
                self._curtsies_input.__enter__()
                self._curtsies_active = True
            except Exception:
                # curtsies can fail to take over stdin (no tty, CI); run without input
                self._curtsies_input = None
                self._curtsies_active = False

    def cleanup(self):
        """Disable mouse reporting, exit fullscreen mode and restore terminal."""
        if self.is_fullscreen:
            print(MOUSE_OFF, end='')
            print(self.term.exit_fullscreen, end='')
            print(self.term.normal_cursor, end='', flush=True)
            self.is_fullscreen = False
        if self._curtsies_input is not None:
            try:
                if self._curtsies_active:
                    self._curtsies_input.__exit__(None, None, None)  # type: ignore
            except Exception:
                # Teardown must never crash the app
                pass
            finally:
                self._curtsies_input = None
                self._curtsies_active = False

    def compose_line(self, text: str, width: int, selection: Optional[tuple[int, int]] = None,
                     cursor_x: Optional[int] = None, theme: Theme = DEFAULT_THEME) -> str:
        """Compose one padded display row with selection and cursor highlighting."""
        width = max(width, 0)
        padded = text[:width].ljust(width)
        term = self.term
        out = []
        active = None
        for i, ch in enumerate(padded):
            if cursor_x is not None and i == cursor_x:
                attr = theme.cursor
            elif selection and selection[0] <= i < selection[1]:
                attr = theme.selection
            else:
                attr = None
            if attr != active:
                out.append(str(term.normal))
                if attr:
                    out.append(str(getattr(term, attr)))
                active = attr
            out.append(ch)
        if active:
            out.append(str(term.normal))
        return ''.join(out)

    def draw_frame(self, frame: Frame, top: int, width: int, title: str = "",
                   status: str = "", theme: Theme = DEFAULT_THEME) -> None:
        """Draw a title bar, the editor frame starting at row ``top``, and a status line."""
        term = self.term
        print(term.home + term.clear, end='')

        if top > 0:
            title_attr = str(getattr(term, theme.title))
            print(term.move(0, 0) + title_attr + title[:term.width] + str(term.normal), end='')

        for y, line in enumerate(frame.lines):
            if frame.placeholder:
                attr = str(getattr(term, theme.placeholder)) if y == 0 and line else ""
                print(term.move(top + y, 0) + attr + line[:width] + str(term.normal), end='')
                continue
            sel = frame.selection_ranges[y] if y < len(frame.selection_ranges) else None
            cursor_x = frame.cursor[1] if frame.cursor and frame.cursor[0] == y else None
            print(term.move(top + y, 0) + self.compose_line(line, width, sel, cursor_x, theme), end='')

        status_attr = str(getattr(term, theme.status))
        print(term.move(term.height - 1, 0) + status_attr + status[:term.width].ljust(term.width)
              + str(term.normal), end='', flush=True)

    def draw_help(self, title: str, help_lines: list[str]) -> None:
        """Draw a centered help screen over the whole terminal."""
        term = self.term
        print(term.home + term.clear, end='')

        width = term.width
        title_pos = max(0, (width - len(title)) // 2)
        print(f"{term.move(1, title_pos)}{term.bold}{title}{term.normal}", end='')

        content_start_y = max(3, (term.height - len(help_lines)) // 2)
        max_line_length = max((len(line) for line in help_lines), default=0)
        left_margin = max(0, (width - max_line_length) // 2)
        for i, line in enumerate(help_lines):
            print(f"{term.move(content_start_y + i, left_margin)}{line}", end='')

        print(f"{term.move(term.height - 1, 0)} Press any key to continue", end='', flush=True)

    def draw_error_message(self, message1: str, message2: str = ""):
        """Draw an error message in the center of the screen."""
        term = self.term
        print(term.home + term.clear, end='')

        center_y = term.height // 2
        box_width = max(len(message1), len(message2)) + 4
        left_margin = max(0, (term.width - box_width) // 2)

        print(term.move(center_y - 2, left_margin) + "╔" + "═" * (box_width - 2) + "╗", end='')
        print(term.move(center_y - 1, left_margin) + "║ " + message1.center(box_width - 4) + " ║", end='')
        if message2:
            print(term.move(center_y, left_margin) + "║ " + message2.center(box_width - 4) + " ║", end='')
            print(term.move(center_y + 1, left_margin) + "╚" + "═" * (box_width - 2) + "╝", end='')
        else:
            print(term.move(center_y, left_margin) + "╚" + "═" * (box_width - 2) + "╝", end='')

        help_text = "Esc to quit | Resize terminal to continue"
        help_pos = max(0, (term.width - len(help_text)) // 2)
        print(term.move(term.height - 1, help_pos) + help_text, end='', flush=True)

    def _read_token(self, timeout: Optional[float]) -> Optional[str]:
        if self._curtsies_input is None:
            return None
        if timeout is None:
            return str(next(self._curtsies_input))  # type: ignore
        r, _, _ = select.select([sys.stdin], [], [], max(0.0, float(timeout)))
        if not r:
            return None
        return str(next(self._curtsies_input))  # type: ignore

    def get_key(self, timeout=None) -> Optional[str]:
        """Get the next input token.

        Mouse reports that curtsies does not recognize may arrive split into
        several tokens; these are joined back into one raw SGR sequence.
        Anything else is returned token by token.
        """
        if self._pending:
            return self._pending.popleft()
        token = self._read_token(timeout)
        if token is None:
            return None

        buf = _raw_text(token)
        if buf is None or not SGR_MOUSE_PREFIX_RE.fullmatch(buf):
            return token

        tokens = [token]
        while not SGR_MOUSE_RE.fullmatch(buf):
            nxt = self._read_token(ESCAPE_DELAY)
            if nxt is None:
                break
            tokens.append(nxt)
            piece = _raw_text(nxt)
            candidate = buf + piece if piece is not None else None
            if candidate is None or not (SGR_MOUSE_PREFIX_RE.fullmatch(candidate)
                                         or SGR_MOUSE_RE.fullmatch(candidate)):
                break
            buf = candidate

        if SGR_MOUSE_RE.fullmatch(buf):
            return buf
        # Not a mouse report after all; replay the tokens one by one
        self._pending.extend(tokens[1:])
        return tokens[0]

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height


def _raw_text(token: str) -> Optional[str]:
    """Characters a curtsies token stands for, if it can be part of a mouse report."""
    if token in ('<ESC>', '<Esc>', '\x1b'):
        return '\x1b'
    if token in ('<Esc+[>', '<ESC+[>'):
        return '\x1b['
    if len(token) == 1:
        return token
    if token.startswith('\x1b[<'):
        return token
    return None
