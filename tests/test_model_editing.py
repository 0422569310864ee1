"""Test buffer mutation, offsets and the dirty flag."""

import pytest
from jotter.model import TextModel, CursorPosition
from jotter.view import TerminalTextView


def create_test_model(lines, width=80, height=24):
    """Create a model with a real view of the given size."""
    view = TerminalTextView(num_rows=height, num_columns=width)
    return TextModel(view, lines=lines)


def test_new_model_has_one_empty_line():
    model = create_test_model(None)
    assert model.lines == [""]
    assert model.value() == ""


@pytest.mark.parametrize("text", ["", "a", "a\n\nb\n", "\n", "hello\nworld", "ünï\ncödé"])
def test_set_value_round_trip(text):
    model = create_test_model(None)
    model.set_value(text)
    assert model.value() == text
    assert len(model.lines) >= 1


def test_set_value_resets_state_but_keeps_kill_buffer():
    model = create_test_model(["one", "two"])
    model.cursor_position = CursorPosition(1, 2)
    model.kill_buffer = "saved"
    model.dirty = True
    model.selection.begin(1)

    model.set_value("fresh")

    assert model.cursor_position == CursorPosition(0, 0)
    assert model.dirty is False
    assert model.selection.anchor is None
    assert model.view.viewport_row == 0
    assert model.kill_buffer == "saved"


def test_insert_char_advances_cursor_and_marks_dirty():
    model = create_test_model(["hllo"])
    model.cursor_position = CursorPosition(0, 1)
    model.insert_char('e')
    assert model.lines == ["hello"]
    assert model.cursor_position == CursorPosition(0, 2)
    assert model.dirty is True


def test_insert_newline_splits_line():
    model = create_test_model(["hello"])
    model.cursor_position = CursorPosition(0, 2)
    model.insert_newline()
    assert model.lines == ["he", "llo"]
    assert model.cursor_position == CursorPosition(1, 0)
    assert model.view.desired_col == 0


def test_insert_text_with_newlines():
    model = create_test_model(["ab"])
    model.cursor_position = CursorPosition(0, 1)
    model.insert_text("X\nY")
    assert model.value() == "aX\nYb"
    assert model.cursor_position == CursorPosition(1, 1)


def test_delete_backward_within_line():
    model = create_test_model(["abc"])
    model.cursor_position = CursorPosition(0, 2)
    model.delete_backward()
    assert model.lines == ["ac"]
    assert model.cursor_position.col == 1


def test_delete_backward_joins_lines():
    model = create_test_model(["ab", "cd"])
    model.cursor_position = CursorPosition(1, 0)
    model.delete_backward()
    assert model.lines == ["abcd"]
    assert model.cursor_position == CursorPosition(0, 2)


def test_delete_backward_at_document_start_is_noop():
    model = create_test_model(["abc"])
    model.delete_backward()
    assert model.lines == ["abc"]
    assert model.cursor_position == CursorPosition(0, 0)
    assert model.dirty is False


def test_delete_forward_joins_lines():
    model = create_test_model(["ab", "cd"])
    model.cursor_position = CursorPosition(0, 2)
    model.delete_forward()
    assert model.lines == ["abcd"]
    assert model.cursor_position == CursorPosition(0, 2)


def test_delete_forward_at_document_end_is_noop():
    model = create_test_model(["ab"])
    model.cursor_position = CursorPosition(0, 2)
    model.delete_forward()
    assert model.lines == ["ab"]
    assert model.dirty is False


def test_delete_range_across_lines():
    model = create_test_model(["hello", "world"])
    model.delete_range(3, 8)
    assert model.value() == "helrld"
    assert model.get_cursor() == 3
    assert model.dirty is True


def test_delete_range_normalizes_order():
    model = create_test_model(["hello", "world"])
    model.delete_range(8, 3)
    assert model.value() == "helrld"
    assert model.get_cursor() == 3


def test_offsets_round_trip():
    model = create_test_model(["ab", "", "cde"])
    text = model.value()
    for offset in range(len(text) + 1):
        model.set_cursor(offset)
        assert model.get_cursor() == offset


def test_set_cursor_clamps():
    model = create_test_model(["ab", "cde"])
    model.set_cursor(-5)
    assert model.get_cursor() == 0
    model.set_cursor(1000)
    assert model.cursor_position == CursorPosition(1, 3)
    assert model.get_cursor() == 6


def test_offset_to_position_line_boundaries():
    model = create_test_model(["ab", "cd"])
    assert model.offset_to_position(2) == CursorPosition(0, 2)
    assert model.offset_to_position(3) == CursorPosition(1, 0)


def test_dirty_flag_controls():
    model = create_test_model(["ab"])
    model.mark_dirty()
    assert model.dirty is True
    model.clear_dirty()
    assert model.dirty is False


def test_count_words():
    model = create_test_model(["hello  world", "", "  one"])
    assert model.count_words() == 3
