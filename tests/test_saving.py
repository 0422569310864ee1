"""Test note loading, atomic saving and the save/quit key flow."""

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock

from jotter.cursor_store import CursorStore
from jotter.editor import Editor
from jotter.keyboard import KeyEvent, KeyType, MouseAction, MouseButton, MouseEvent


def key(key_type, value):
    return KeyEvent(key_type=key_type, value=value, raw=value)


class EditorTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.terminal = Mock()
        self.terminal.width = 80
        self.terminal.height = 24
        self.store = CursorStore(config_dir=Path(self.temp_dir) / "config")
        self.clipboard = Mock()
        self.editor = Editor(terminal=self.terminal, cursor_store=self.store,
                             clipboard=self.clipboard)
        self.note_path = os.path.join(self.temp_dir, "note.txt")

    def tearDown(self):
        os.close(self.editor._resize_pipe_r)
        os.close(self.editor._resize_pipe_w)
        shutil.rmtree(self.temp_dir)

    def type_text(self, text):
        for ch in text:
            self.editor.handle_event(key(KeyType.REGULAR, ch))

    def read_note(self):
        with open(self.note_path, encoding='utf-8') as f:
            return f.read()


class TestLoadAndSave(EditorTestCase):

    def test_missing_file_starts_empty(self):
        self.editor.load_file(self.note_path)
        self.assertEqual(self.editor.widget.value(), "")
        self.assertEqual(self.editor.filename, self.note_path)
        self.assertFalse(self.editor.widget.dirty())

    def test_save_writes_content_and_clears_dirty(self):
        self.editor.load_file(self.note_path)
        self.type_text("hello")
        self.assertTrue(self.editor.widget.dirty())

        self.assertTrue(self.editor.save_file(self.note_path))
        self.assertEqual(self.read_note(), "hello")
        self.assertFalse(self.editor.widget.dirty())

    def test_save_remembers_cursor(self):
        self.editor.load_file(self.note_path)
        self.type_text("hello world")
        self.editor.widget.set_cursor(6)
        self.editor.save_file(self.note_path)

        self.assertEqual(self.store.load(self.note_path), 6)

    def test_load_restores_cursor(self):
        with open(self.note_path, 'w', encoding='utf-8') as f:
            f.write("one\ntwo\nthree")
        self.store.save(self.note_path, 5)

        self.editor.load_file(self.note_path)
        self.assertEqual(self.editor.widget.get_cursor(), 5)
        self.assertEqual(self.editor.widget.model.cursor_position.row, 1)

    def test_load_clamps_stale_cursor(self):
        with open(self.note_path, 'w', encoding='utf-8') as f:
            f.write("abc")
        self.store.save(self.note_path, 100)

        self.editor.load_file(self.note_path)
        self.assertEqual(self.editor.widget.get_cursor(), 3)

    def test_save_leaves_no_temp_files(self):
        self.editor.load_file(self.note_path)
        self.type_text("x")
        self.editor.save_file(self.note_path)

        leftovers = [name for name in os.listdir(self.temp_dir) if name.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_save_to_missing_directory_fails(self):
        bad_path = os.path.join(self.temp_dir, "nope", "note.txt")
        self.type_text("x")

        with self.assertLogs('jotter.editor', level='WARNING'):
            self.assertFalse(self.editor.save_file(bad_path))
        self.assertEqual(self.editor.status_message, f"Error: Cannot save to {bad_path}")
        self.assertTrue(self.editor.widget.dirty())


class TestKeyFlow(EditorTestCase):

    def test_ctrl_s_saves(self):
        self.editor.load_file(self.note_path)
        self.type_text("hi")
        self.editor.handle_event(key(KeyType.CTRL, 's'))

        self.assertEqual(self.read_note(), "hi")
        self.assertEqual(self.editor.status_message, f"Saved to {self.note_path}")

    def test_next_key_clears_status_message(self):
        self.editor.load_file(self.note_path)
        self.editor.handle_event(key(KeyType.CTRL, 's'))
        self.editor.handle_event(key(KeyType.SPECIAL, 'right'))
        self.assertIsNone(self.editor.status_message)

    def test_escape_saves_and_quits(self):
        self.editor.load_file(self.note_path)
        self.editor.running = True
        self.type_text("bye")
        self.editor.handle_event(key(KeyType.SPECIAL, 'escape'))

        self.assertFalse(self.editor.running)
        self.assertEqual(self.read_note(), "bye")

    def test_ctrl_q_saves_and_quits(self):
        self.editor.load_file(self.note_path)
        self.editor.running = True
        self.type_text("bye")
        self.editor.handle_event(key(KeyType.CTRL, 'q'))

        self.assertFalse(self.editor.running)
        self.assertEqual(self.read_note(), "bye")

    def test_failed_save_on_quit_asks_for_confirmation(self):
        self.editor.load_file(os.path.join(self.temp_dir, "nope", "note.txt"))
        self.editor.running = True
        self.type_text("x")

        with self.assertLogs('jotter.editor', level='WARNING'):
            self.editor.handle_event(key(KeyType.SPECIAL, 'escape'))
        self.assertTrue(self.editor.running)
        self.assertEqual(self.editor.prompt_mode, 'quit_confirm')

        self.editor.handle_event(key(KeyType.REGULAR, 'y'))
        self.assertFalse(self.editor.running)

    def test_declining_quit_keeps_editing(self):
        self.editor.load_file(os.path.join(self.temp_dir, "nope", "note.txt"))
        self.editor.running = True
        self.type_text("x")

        with self.assertLogs('jotter.editor', level='WARNING'):
            self.editor.handle_event(key(KeyType.SPECIAL, 'escape'))
        self.editor.handle_event(key(KeyType.REGULAR, 'n'))
        self.assertTrue(self.editor.running)
        self.assertIsNone(self.editor.prompt_mode)

    def test_help_toggles(self):
        self.editor.handle_event(key(KeyType.SPECIAL, 'f1'))
        self.assertTrue(self.editor.help_visible)
        self.editor.handle_event(key(KeyType.REGULAR, 'a'))
        self.assertFalse(self.editor.help_visible)
        self.assertEqual(self.editor.widget.value(), "")

        self.editor.handle_event(key(KeyType.CTRL, 'h'))
        self.assertTrue(self.editor.help_visible)

    def test_save_without_filename_prompts(self):
        self.type_text("draft")
        self.editor.handle_event(key(KeyType.CTRL, 's'))
        self.assertEqual(self.editor.prompt_mode, 'save_filename')

        self.type_text(self.note_path)
        self.editor.handle_event(key(KeyType.SPECIAL, 'enter'))

        self.assertIsNone(self.editor.prompt_mode)
        self.assertEqual(self.editor.filename, self.note_path)
        self.assertEqual(self.read_note(), "draft")

    def test_prompt_can_be_cancelled(self):
        self.type_text("draft")
        self.editor.handle_event(key(KeyType.CTRL, 's'))
        self.type_text("abc")
        self.editor.handle_event(key(KeyType.SPECIAL, 'backspace'))
        self.assertEqual(self.editor.prompt_input, "ab")

        self.editor.handle_event(key(KeyType.CTRL, 'g'))
        self.assertIsNone(self.editor.prompt_mode)
        self.assertEqual(self.editor.widget.value(), "draft")

    def test_quit_empty_unnamed_note_does_not_prompt(self):
        self.editor.running = True
        self.editor.handle_event(key(KeyType.SPECIAL, 'escape'))
        self.assertFalse(self.editor.running)
        self.assertIsNone(self.editor.prompt_mode)

    def test_quit_unnamed_note_prompts_then_quits(self):
        self.editor.running = True
        self.type_text("draft")
        self.editor.handle_event(key(KeyType.CTRL, 'q'))
        self.assertEqual(self.editor.prompt_mode, 'save_filename_quit')

        self.type_text(self.note_path)
        self.editor.handle_event(key(KeyType.SPECIAL, 'enter'))
        self.assertFalse(self.editor.running)
        self.assertEqual(self.read_note(), "draft")


class TestScreen(EditorTestCase):

    def test_title_marks_unsaved_changes(self):
        self.editor.load_file(self.note_path)
        self.assertEqual(self.editor._title(), " note.txt")
        self.type_text("x")
        self.assertEqual(self.editor._title(), " note.txt *")

    def test_status_shows_word_count(self):
        self.type_text("two words")
        self.assertEqual(self.editor._status(), " 2 words | F1 for help")

    def test_geometry_leaves_room_for_title_and_status(self):
        self.editor.update_geometry()
        self.assertEqual(self.editor.widget.height, 22)
        self.assertEqual(self.editor.widget.width, 80)
        self.assertFalse(self.editor.error_mode)

    def test_small_terminal_enters_error_mode(self):
        self.terminal.width = 10
        self.editor.update_geometry()
        self.assertTrue(self.editor.error_mode)

        self.editor.handle_event(key(KeyType.REGULAR, 'x'))
        self.assertEqual(self.editor.widget.value(), "")

    def test_mouse_click_moves_cursor(self):
        self.editor.load_file(self.note_path)
        self.type_text("hello")
        # Row 1 on screen is the first text row, below the title bar
        self.editor.handle_event(MouseEvent(MouseButton.LEFT, MouseAction.PRESS, 2, 1))
        self.assertEqual(self.editor.widget.get_cursor(), 2)

    def test_mouse_ignored_while_help_is_shown(self):
        self.type_text("hello")
        self.editor.help_visible = True
        self.editor.handle_event(MouseEvent(MouseButton.LEFT, MouseAction.PRESS, 0, 1))
        self.assertEqual(self.editor.widget.get_cursor(), 5)

    def test_draw_passes_frame_to_terminal(self):
        self.editor.load_file(self.note_path)
        self.editor.update_geometry()
        self.editor._draw()

        self.terminal.draw_frame.assert_called_once()
        args, kwargs = self.terminal.draw_frame.call_args
        self.assertEqual(args[1], 1)
        self.assertEqual(kwargs['title'], " note.txt")
