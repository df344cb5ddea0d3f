"""Tests for pi.screen.width -- display width of glyphs."""

from __future__ import annotations

from pi.screen.width import glyph_width, iter_glyphs, text_width


class TestTextWidth:
    def test_plain_ascii(self) -> None:
        assert text_width("hello") == 5

    def test_empty_string(self) -> None:
        assert text_width("") == 0

    def test_wide_cjk_characters_count_as_two(self) -> None:
        assert text_width("世") == 2

    def test_mixed_ascii_and_wide(self) -> None:
        assert text_width("A世B") == 4

    def test_combining_mark_adds_nothing(self) -> None:
        assert text_width("é") == 1

    def test_control_characters_are_zero_width(self) -> None:
        assert text_width("\x07") == 0


class TestGlyphs:
    def test_emoji_sequence_is_two_cells(self) -> None:
        assert glyph_width("\u2764\ufe0f") == 2

    def test_iter_glyphs_groups_clusters(self) -> None:
        assert list(iter_glyphs("aé")) == [("a", 1), ("é", 1)]
