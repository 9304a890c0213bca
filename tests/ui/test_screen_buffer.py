# tests/ui/test_screen_buffer.py
"""Unit tests for the in-memory `ScreenBuffer` grid."""

from gitdeck.ui.ScreenBuffer import ScreenBuffer, text_width, truncate_string


class TestScreenBuffer:
    def test_put_returns_next_column(self) -> None:
        buf = ScreenBuffer(2, 10)
        assert buf.put(0, 1, "abc", "help_key") == 4
        assert buf.row_text(0) == " abc      "
        assert buf.style_at(0, 1) == "help_key"
        assert buf.style_at(0, 4) == "normal"

    def test_put_clips_at_max_x(self) -> None:
        buf = ScreenBuffer(1, 10)
        buf.put(0, 0, "abcdefgh", max_x=4)
        assert buf.row_text(0) == "abcd      "

    def test_rows_outside_are_ignored(self) -> None:
        buf = ScreenBuffer(1, 5)
        assert buf.put(3, 2, "x") == 2
        buf.fill(-1, 0, 5, "selected")
        assert buf.row_text(0) == "     "

    def test_wide_glyph_takes_two_cells(self) -> None:
        buf = ScreenBuffer(1, 6)
        assert buf.put(0, 0, "中a") == 3
        assert buf.cells[0][0].char == "中"
        assert buf.cells[0][1].char == ""
        assert buf.cells[0][2].char == "a"

    def test_wide_glyph_at_clip_edge_becomes_space(self) -> None:
        buf = ScreenBuffer(1, 4)
        buf.put(0, 0, "abc中")
        assert buf.row_text(0) == "abc "

    def test_tabs_are_expanded(self) -> None:
        buf = ScreenBuffer(1, 6)
        buf.put(0, 0, "\tx")
        assert buf.row_text(0) == "  x   "

    def test_segments_group_styles(self) -> None:
        buf = ScreenBuffer(1, 8)
        buf.put(0, 0, "ab", "help_key")
        buf.fill(0, 4, 2, "selected", "-")
        assert buf.segments(0) == [
            (0, "ab", "help_key"),
            (2, "  ", "normal"),
            (4, "--", "selected"),
            (6, "  ", "normal"),
        ]


def test_width_helpers() -> None:
    assert text_width("abc") == 3
    assert text_width("中文") == 4
    assert truncate_string("中文字", 5) == "中文"
    assert truncate_string("hello", 10) == "hello"
