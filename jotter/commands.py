"""Command pattern implementation for editing keys."""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Optional, TYPE_CHECKING
from .keyboard import KeyType

if TYPE_CHECKING:
    from .widget import EditorWidget
    from .keyboard import KeyEvent


class EditorCommand(ABC):
    """Base class for editor commands."""

    @abstractmethod
    def execute(self, editor: 'EditorWidget', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Args:
            editor: EditorWidget instance
            key_event: The key event that triggered this command

        Returns:
            True if the command modified the document
        """
        pass


class MovementCommand(EditorCommand):
    """Base class for cursor movement commands.

    Any movement drops an active mouse selection before moving.
    """

    def execute(self, editor: 'EditorWidget', key_event: 'KeyEvent') -> bool:
        editor.model.selection.clear()
        self._move(editor, key_event)
        return False

    @abstractmethod
    def _move(self, editor: 'EditorWidget', key_event: 'KeyEvent'):
        """Perform the movement."""
        pass


class LeftCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.left_char()


class RightCharCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.right_char()


class UpLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_up()


class DownLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.move_cursor_down()


class LeftWordCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.left_word()


class RightWordCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.right_word()


class BeginningOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_beginning_of_line()


class EndOfLineCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_end_of_line()


class TopOfDocumentCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_to_top()


class BottomOfDocumentCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.model.move_to_bottom()


class PageDownCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.scroll_page_down()


class PageUpCommand(MovementCommand):
    def _move(self, editor, key_event):
        editor.view.scroll_page_up()


class EscapeCommand(MovementCommand):
    """Drop the selection and nothing else."""

    def _move(self, editor, key_event):
        pass


class EditCommand(EditorCommand):
    """Base class for editing commands.

    An active selection is dropped first; subclasses that act on the
    selection override ``_with_selection``.
    """

    def execute(self, editor: 'EditorWidget', key_event: 'KeyEvent') -> bool:
        model = editor.model
        was_dirty = model.dirty
        model.dirty = False
        if model.selection.has_selection:
            self._with_selection(editor, key_event)
        else:
            model.selection.clear()
            self._edit(editor, key_event)
        changed = model.dirty
        model.dirty = was_dirty or changed
        return changed

    def _with_selection(self, editor: 'EditorWidget', key_event: 'KeyEvent'):
        editor.model.selection.clear()
        self._edit(editor, key_event)

    @abstractmethod
    def _edit(self, editor: 'EditorWidget', key_event: 'KeyEvent'):
        """Perform the edit."""
        pass


class BackspaceCommand(EditCommand):
    def _with_selection(self, editor, key_event):
        editor.model.delete_selection()

    def _edit(self, editor, key_event):
        editor.model.delete_backward()


class DeleteCharCommand(EditCommand):
    def _with_selection(self, editor, key_event):
        editor.model.delete_selection()

    def _edit(self, editor, key_event):
        editor.model.delete_forward()


class InsertNewlineCommand(EditCommand):
    def _with_selection(self, editor, key_event):
        editor.model.delete_selection()
        editor.model.insert_newline()

    def _edit(self, editor, key_event):
        editor.model.insert_newline()


class InsertTextCommand(EditCommand):
    """Type a character, replacing the selection if there is one."""

    def _with_selection(self, editor, key_event):
        if not self._printable(key_event.value):
            editor.model.selection.clear()
            return
        editor.model.delete_selection()
        editor.model.insert_text(key_event.value)

    def _edit(self, editor, key_event):
        if self._printable(key_event.value):
            editor.model.insert_text(key_event.value)

    @staticmethod
    def _printable(text: str) -> bool:
        # Filter out control characters
        return bool(text) and all(ord(ch) >= 32 or ch == '\t' for ch in text)


class KillLineCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.kill_line()


class KillLineBackwardCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.kill_line_backward()


class KillWordCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.backward_kill_word()


class YankCommand(EditCommand):
    def _edit(self, editor, key_event):
        editor.model.yank()


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], EditorCommand] = {}
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        # Movement commands
        self.register((KeyType.SPECIAL, 'left'), LeftCharCommand())
        self.register((KeyType.SPECIAL, 'right'), RightCharCommand())
        self.register((KeyType.SPECIAL, 'up'), UpLineCommand())
        self.register((KeyType.SPECIAL, 'down'), DownLineCommand())

        # Word movement
        self.register((KeyType.CTRL_SPECIAL, 'left'), LeftWordCommand())
        self.register((KeyType.CTRL_SPECIAL, 'right'), RightWordCommand())
        self.register((KeyType.ALT, 'left'), LeftWordCommand())
        self.register((KeyType.ALT, 'right'), RightWordCommand())
        self.register((KeyType.ALT, 'b'), LeftWordCommand())
        self.register((KeyType.ALT, 'f'), RightWordCommand())

        # Line movement
        self.register((KeyType.SPECIAL, 'home'), BeginningOfLineCommand())
        self.register((KeyType.SPECIAL, 'end'), EndOfLineCommand())
        self.register((KeyType.CTRL, 'a'), BeginningOfLineCommand())
        self.register((KeyType.CTRL, 'e'), EndOfLineCommand())

        # Document movement
        self.register((KeyType.CTRL_SPECIAL, 'home'), TopOfDocumentCommand())
        self.register((KeyType.CTRL_SPECIAL, 'end'), BottomOfDocumentCommand())
        self.register((KeyType.SPECIAL, 'page_down'), PageDownCommand())
        self.register((KeyType.SPECIAL, 'page_up'), PageUpCommand())
        self.register((KeyType.SPECIAL, 'escape'), EscapeCommand())

        # Editing commands
        self.register((KeyType.SPECIAL, 'backspace'), BackspaceCommand())
        self.register((KeyType.SPECIAL, 'delete'), DeleteCharCommand())
        self.register((KeyType.CTRL, 'd'), DeleteCharCommand())
        self.register((KeyType.SPECIAL, 'enter'), InsertNewlineCommand())

        # Kill ring
        self.register((KeyType.CTRL, 'k'), KillLineCommand())
        self.register((KeyType.CTRL, 'u'), KillLineBackwardCommand())
        self.register((KeyType.CTRL, 'w'), KillWordCommand())
        self.register((KeyType.ALT, 'backspace'), KillWordCommand())
        self.register((KeyType.CTRL, 'y'), YankCommand())

    def register(self, key: Tuple[KeyType, str], command: EditorCommand):
        """Register a command for a key combination."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[EditorCommand]:
        """Get the command for a key combination."""
        return self._commands.get((key_type, value))

    def execute(self, editor: 'EditorWidget', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the document was modified
        """
        if key_event.is_alt:
            command = self.get_command(KeyType.ALT, key_event.value)
        else:
            command = self.get_command(key_event.key_type, key_event.value)

        if command:
            return command.execute(editor, key_event)

        if key_event.key_type == KeyType.REGULAR:
            return InsertTextCommand().execute(editor, key_event)

        # Unbound key: only side effect is dropping the selection
        editor.model.selection.clear()
        return False
