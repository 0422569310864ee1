"""Test word navigation (Ctrl-Left/Ctrl-Right)."""

from jotter.model import TextModel, CursorPosition
from jotter.view import TerminalTextView


def create_test_model(lines):
    view = TerminalTextView(num_rows=10, num_columns=80)
    return TextModel(view, lines=lines)


def test_right_word_moves_to_next_word_start():
    model = create_test_model(["foo bar baz"])
    model.right_word()
    assert model.cursor_position.col == 4
    model.right_word()
    assert model.cursor_position.col == 8
    model.right_word()
    assert model.cursor_position.col == 11


def test_right_word_at_line_end_moves_to_next_line():
    model = create_test_model(["foo", "bar"])
    model.right_word()
    assert model.cursor_position == CursorPosition(1, 0)


def test_right_word_on_last_line_stops_at_end():
    model = create_test_model(["foo"])
    model.cursor_position = CursorPosition(0, 3)
    model.right_word()
    assert model.cursor_position == CursorPosition(0, 3)


def test_left_word_moves_to_word_start():
    model = create_test_model(["foo bar baz"])
    model.cursor_position = CursorPosition(0, 11)
    model.left_word()
    assert model.cursor_position.col == 8
    model.left_word()
    assert model.cursor_position.col == 4
    model.left_word()
    assert model.cursor_position.col == 0


def test_left_word_skips_punctuation():
    model = create_test_model(["one, two"])
    model.cursor_position = CursorPosition(0, 5)
    model.left_word()
    assert model.cursor_position.col == 0


def test_left_word_at_line_start_moves_to_last_word_of_previous_line():
    model = create_test_model(["foo bar", "baz"])
    model.cursor_position = CursorPosition(1, 0)
    model.left_word()
    assert model.cursor_position == CursorPosition(0, 4)


def test_left_word_across_line_skips_trailing_separators():
    model = create_test_model(["one two, ", "three"])
    model.cursor_position = CursorPosition(1, 0)
    model.left_word()
    assert model.cursor_position == CursorPosition(0, 4)


def test_left_word_onto_empty_line():
    model = create_test_model(["", "bar"])
    model.cursor_position = CursorPosition(1, 0)
    model.left_word()
    assert model.cursor_position == CursorPosition(0, 0)


def test_word_jump_back_after_crossing_line():
    model = create_test_model(["ab", "cd"])
    model.cursor_position = CursorPosition(0, 1)
    model.right_word()
    assert model.cursor_position == CursorPosition(1, 0)
    model.left_word()
    assert model.cursor_position == CursorPosition(0, 0)


def test_left_word_at_document_start_stays():
    model = create_test_model(["foo"])
    model.left_word()
    assert model.cursor_position == CursorPosition(0, 0)


def test_forward_then_backward_never_passes_start():
    line = "alpha beta_2 gamma, delta"
    model = create_test_model([line])
    for start in range(1, len(line)):
        model.cursor_position = CursorPosition(0, start)
        model.right_word()
        model.left_word()
        col = model.cursor_position.col
        assert col <= start
        # Lands on a word start
        assert col == 0 or not (line[col - 1].isalnum() or line[col - 1] == '_')


def test_forward_then_backward_never_passes_start_across_lines():
    lines = ["first line ok", "  x_y, z ", "", "last."]
    model = create_test_model(lines)
    for row, line in enumerate(lines):
        for start in range(1, len(line)):
            model.cursor_position = CursorPosition(row, start)
            model.right_word()
            model.left_word()
            pos = model.cursor_position
            assert (pos.row, pos.col) <= (row, start)
            landed = lines[pos.row]
            assert pos.col == 0 or not (landed[pos.col - 1].isalnum() or landed[pos.col - 1] == '_')
