"""Jotter CLI entry point.

Allows running via `python -m jotter` and provides the console script
defined in `pyproject.toml`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from .version import get_version_string

USAGE = "usage: jotter [--version] [--keytest] [--log-file PATH] [NOTE]"


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Print parsed key and mouse events until ESC is pressed."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyEvent, KeyType, MouseEvent

    term = TerminalInterface()
    term.setup()
    print("Keyboard test mode: press keys or use the mouse to see parsed events.")
    print("Quit with ESC.")

    kb = KeyboardHandler(term)
    try:
        while True:
            ev = kb.get_event(timeout=None)
            if ev is None:
                continue
            if isinstance(ev, MouseEvent):
                print(f"mouse button={ev.button.value} action={ev.action.value} x={ev.x} y={ev.y}")
                continue
            assert isinstance(ev, KeyEvent)
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                print("Exiting keyboard test.")
                break
            parts = [f"type={ev.key_type.value}", f"value={ev.value}", f"raw='{_escape_bytes(ev.raw)}'"]
            flags = [name for name, on in (('alt', ev.is_alt), ('ctrl', ev.is_ctrl), ('seq', ev.is_sequence)) if on]
            if flags:
                parts.append(f"flags={'+'.join(flags)}")
            print(' '.join(parts))
    finally:
        term.cleanup()


def configure_logging(log_file: Optional[str]) -> None:
    """Send log records to a file, or drop them; the terminal belongs to the UI."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.INFO,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def main(argv: Optional[list[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    log_file = None
    filename = None
    while args:
        arg = args.pop(0)
        if arg in ("--version", "-V"):
            print(get_version_string())
            return 0
        if arg in ("--keytest", "--keyboard-test"):
            run_keyboard_test()
            return 0
        if arg in ("-h", "--help"):
            print(USAGE)
            return 0
        if arg == "--log-file":
            if not args:
                print(USAGE, file=sys.stderr)
                return 2
            log_file = args.pop(0)
        elif arg.startswith("--log-file="):
            log_file = arg.split("=", 1)[1]
        elif arg.startswith("-") and arg != "-":
            print(f"jotter: unknown option {arg}", file=sys.stderr)
            print(USAGE, file=sys.stderr)
            return 2
        elif filename is None:
            filename = arg
        else:
            print(USAGE, file=sys.stderr)
            return 2

    configure_logging(log_file)

    # Lazy import to avoid importing UI deps for --version
    from .editor import Editor
    editor = Editor()
    if filename:
        try:
            editor.load_file(filename)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error loading file: {e}", file=sys.stderr)
            return 1
    editor.run()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
