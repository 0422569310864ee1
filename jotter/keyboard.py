"""Keyboard and mouse input handling using curtsies-style tokens."""

import re
from typing import Optional, Union
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"
    CTRL_SPECIAL = "ctrl_special"  # Ctrl + arrow keys, Ctrl + Home, etc.


@dataclass
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str  # The raw key string from curtsies
    is_alt: bool = False
    is_ctrl: bool = False
    is_sequence: bool = False


class MouseButton(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    NONE = "none"  # Motion with no button held


class MouseAction(Enum):
    PRESS = "press"
    MOTION = "motion"
    RELEASE = "release"


@dataclass
class MouseEvent:
    """A mouse report, with 0-based terminal coordinates."""
    button: MouseButton
    action: MouseAction
    x: int
    y: int


# SGR (1006) extended mouse report: ESC [ < button ; x ; y (M|m)
SGR_MOUSE_RE = re.compile(r'\x1b\[<(\d+);(\d+);(\d+)([Mm])')

MOTION_FLAG = 32
WHEEL_FLAG = 64
MODIFIER_MASK = 4 | 8 | 16  # Shift, Meta, Ctrl bits


def parse_mouse(seq: str) -> Optional[MouseEvent]:
    """Parse an SGR mouse report, or return None if ``seq`` is not one."""
    match = SGR_MOUSE_RE.search(seq)
    if not match:
        return None
    code = int(match.group(1)) & ~MODIFIER_MASK
    x = int(match.group(2)) - 1
    y = int(match.group(3)) - 1
    released = match.group(4) == 'm'

    if code & WHEEL_FLAG:
        button = MouseButton.WHEEL_UP if (code & 1) == 0 else MouseButton.WHEEL_DOWN
        return MouseEvent(button, MouseAction.PRESS, x, y)

    motion = bool(code & MOTION_FLAG)
    button = {0: MouseButton.LEFT, 1: MouseButton.MIDDLE, 2: MouseButton.RIGHT}.get(
        code & 3, MouseButton.NONE)
    if released:
        action = MouseAction.RELEASE
    elif motion:
        action = MouseAction.MOTION
    else:
        action = MouseAction.PRESS
    return MouseEvent(button, action, x, y)


class KeyboardHandler:
    """Handles keyboard input using curtsies-style key names."""

    def __init__(self, terminal_interface):
        """Initialize with a terminal interface."""
        self.terminal = terminal_interface

    def get_event(self, timeout: Optional[float] = None) -> Optional[Union[KeyEvent, MouseEvent]]:
        """Get the next input event, mapping curtsies tokens to events."""
        key = self.terminal.get_key(timeout)
        if not key:
            return None
        mouse = parse_mouse(str(key))
        if mouse is not None:
            return mouse
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a curtsies key token into a KeyEvent.

        Args:
            key: curtsies key name such as '<LEFT>' or '<Ctrl-x>', or a
                plain character

        Returns:
            Parsed KeyEvent
        """
        key_str = str(key)

        # Curtsies-style key names like '<LEFT>', '<Ctrl-x>', '<Esc+BACKSPACE>'
        if key_str.startswith('<') and key_str.endswith('>') and len(key_str) > 2:
            name = key_str[1:-1]
            lower = name.lower()
            # Support both '-' and '+' as modifier separators (e.g., '<Esc+u>')
            lower = lower.replace('+', '-')
            parts = lower.split('-') if '-' in lower else [lower]
            mods = set()
            base = parts[-1]
            if len(parts) > 1:
                mods = set(parts[:-1])
            # Trailing '-' means the base itself was a dash (e.g. '<Ctrl-->')
            if base == '' and len(parts) > 1:
                base = '-'
                mods.discard('')
            if 'meta' in mods or 'esc' in mods:
                mods.add('alt')
            if base in ('pageup', 'page_up'):
                base = 'page_up'
            elif base in ('pagedown', 'page_down'):
                base = 'page_down'

            specials = {
                'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
                'delete', 'page_up', 'page_down', 'insert', 'f1',
            }
            if base in ('space', 'spacebar', 'spc') and not mods:
                return KeyEvent(key_type=KeyType.REGULAR, value=' ', raw=' ')
            if base in ('tab',) and not mods:
                return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw='\t')
            if 'ctrl' in mods and len(base) == 1:
                # Ctrl-J / Ctrl-M arrive as Enter on a terminal
                if base in ('j', 'm'):
                    return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str, is_sequence=True)
                return KeyEvent(key_type=KeyType.CTRL, value=base, raw=key_str, is_ctrl=True)
            if 'alt' in mods and (base in specials or len(base) == 1):
                return KeyEvent(key_type=KeyType.ALT, value=base, raw=key_str, is_alt=True)
            if 'ctrl' in mods and base in specials:
                return KeyEvent(key_type=KeyType.CTRL_SPECIAL, value=base, raw=key_str,
                                is_ctrl=True, is_sequence=True)
            if base in specials:
                return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=key_str, is_sequence=True)
            if base in ('esc', 'escape'):
                return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw='\x1b')
            # Unknown token; nothing is bound to it
            return KeyEvent(key_type=KeyType.SPECIAL, value=base, raw=key_str, is_sequence=True)

        # Single-byte ASCII control chars (Ctrl-<letter>)
        if len(key_str) == 1:
            o = ord(key_str)
            if o == 127:
                return KeyEvent(key_type=KeyType.SPECIAL, value='backspace', raw=key_str)
            if 1 <= o <= 26:  # Ctrl-A .. Ctrl-Z (exclude ESC=27)
                ch = chr(ord('a') + o - 1)
                if ch in ('j', 'm'):
                    return KeyEvent(key_type=KeyType.SPECIAL, value='enter', raw=key_str)
                if ch == 'i':
                    return KeyEvent(key_type=KeyType.REGULAR, value='\t', raw=key_str)
                return KeyEvent(key_type=KeyType.CTRL, value=ch, raw=key_str, is_ctrl=True)

        if key_str == '\x1b':
            return KeyEvent(key_type=KeyType.SPECIAL, value='escape', raw='\x1b')

        return KeyEvent(
            key_type=KeyType.REGULAR,
            value=key_str,
            raw=key_str,
            is_sequence=False
        )


def create_keyboard_handler(terminal_interface):
    """Factory function to create a keyboard handler."""
    return KeyboardHandler(terminal_interface)
