"""Clipboard integration: OSC 52 primary selection plus the system clipboard."""

import base64
import logging
from typing import Optional

import pyperclip

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class ClipboardManager:
    """Mirrors mouse-selected text to the terminal and the desktop.

    The primary selection is written with an OSC 52 escape sent straight to
    the controlling terminal, so it also works over ssh. The system
    clipboard goes through pyperclip. Neither failure interrupts editing.
    """

    def __init__(self, tty_path: Optional[str] = EditorConstants.OSC52_TTY, use_system: bool = True):
        self.tty_path = tty_path
        self.use_system = use_system

    @staticmethod
    def osc52_sequence(text: str, selection: str = EditorConstants.OSC52_SELECTION) -> str:
        """Build the OSC 52 escape that sets ``selection`` to ``text``."""
        encoded = base64.b64encode(text.encode('utf-8')).decode('ascii')
        return f"\x1b]52;{selection};{encoded}\x1b\\"

    def copy_primary(self, text: str) -> None:
        """Copy text to the primary selection and the system clipboard."""
        if not text:
            return
        if self.tty_path:
            try:
                with open(self.tty_path, 'w') as tty:
                    tty.write(self.osc52_sequence(text))
                    tty.flush()
            except OSError as e:
                logger.warning(f"Could not write OSC 52 sequence to {self.tty_path}: {e}")
        if self.use_system:
            try:
                pyperclip.copy(text)
            except pyperclip.PyperclipException as e:
                logger.warning(f"System clipboard unavailable: {e}")

