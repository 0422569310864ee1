"""Jotter - a wrapping plain-text editor engine for terminal note taking."""

from .model import TextModel, TextView, CursorPosition
from .view import TerminalTextView, Frame
from .selection import Selection, SelectionState
from .widget import EditorWidget

__all__ = [
    'TextModel',
    'TextView',
    'CursorPosition',
    'TerminalTextView',
    'Frame',
    'Selection',
    'SelectionState',
    'EditorWidget',
]
