"""Constants and configuration for the jotter editor."""

class EditorConstants:
    """Central configuration constants for the editor."""

    # Engine geometry
    DEFAULT_WIDTH = 80  # Wrap width before the caller sets one
    DEFAULT_HEIGHT = 24  # Visible rows before the caller sets one
    FALLBACK_WRAP_WIDTH = 80  # Used for vertical movement when width <= 0

    # Mouse
    WHEEL_SCROLL_LINES = 3  # Visual rows scrolled per wheel notch

    # Clipboard
    OSC52_SELECTION = "p"  # Primary selection target for OSC 52 writes
    OSC52_TTY = "/dev/tty"

    # Terminal requirements
    MIN_TERMINAL_WIDTH = 20
    MIN_TERMINAL_HEIGHT = 3

    # File operations
    ATOMIC_SAVE_PREFIX = "."  # Prefix for temporary save files
    ATOMIC_SAVE_SUFFIX = ".tmp"  # Suffix for temporary save files

    # Resize handling
    RESIZE_PIPE_MARKER = b'R'  # Byte written to pipe to signal resize

    # Cursor position store
    APP_NAME = "jotter"
    CURSOR_STORE_FILENAME = "cursor_positions.json"

    # Status messages
    TERMINAL_TOO_SMALL_MESSAGE = "Terminal too small! Need at least {}x{}."
    CURRENT_SIZE_MESSAGE = "Current size: {}x{}."
    PLACEHOLDER = "Empty note. Start typing; Ctrl-S saves, Esc saves and closes."
