"""Unit tests for :mod:`navigator_go.positions`."""

from __future__ import annotations

import pytest

from navigator_go.positions import (
    Point,
    Range,
    character_index_for_point,
    decode_position,
    encode_offset,
    word_range_at,
)


class TestEncodeOffset:
    """Byte offsets handed to the definition tool."""

    def test_ascii_prefix_matches_character_count(self) -> None:
        assert encode_offset("package main", 7) == 7

    def test_multibyte_prefix_counts_bytes(self) -> None:
        text = 'x := "café" + y'
        cursor = text.index("y")
        assert encode_offset(text, cursor) == cursor + 1
        assert encode_offset(text, cursor) != cursor

    def test_cafe_advances_by_five_bytes(self) -> None:
        assert encode_offset("café", 4) == 5

    def test_four_byte_characters(self) -> None:
        assert encode_offset("🙂a", 1) == 4
        assert encode_offset("🙂a", 2) == 5

    def test_cursor_is_clamped(self) -> None:
        assert encode_offset("abc", -4) == 0
        assert encode_offset("abc", 99) == 3


class TestDecodePosition:
    """1-based tool coordinates become 0-based editor points."""

    def test_subtracts_one(self) -> None:
        assert decode_position("12", "3") == Point(11, 2)

    def test_accepts_integers(self) -> None:
        assert decode_position(1, 1) == Point(0, 0)

    @pytest.mark.parametrize(
        ("row", "column"),
        [("", ""), (None, None), ("12", ""), ("", "3"), ("x", "3"), ("3", None)],
    )
    def test_missing_tokens_yield_no_position(self, row, column) -> None:
        assert decode_position(row, column) is None

    def test_never_negative(self) -> None:
        assert decode_position("0", "0") == Point(0, 0)


class TestCharacterIndexForPoint:
    """Editor points translate to character indexes."""

    TEXT = "package main\n\nfunc main() {\n\tfoo()\n}\n"

    def test_first_line(self) -> None:
        assert character_index_for_point(self.TEXT, Point(0, 8)) == 8

    def test_later_line(self) -> None:
        index = character_index_for_point(self.TEXT, Point(3, 1))
        assert self.TEXT[index:index + 3] == "foo"

    def test_column_clamped_to_line(self) -> None:
        index = character_index_for_point(self.TEXT, Point(0, 500))
        assert index == len("package main")

    def test_row_past_end(self) -> None:
        assert character_index_for_point(self.TEXT, Point(50, 0)) == len(self.TEXT)

    def test_empty_text(self) -> None:
        assert character_index_for_point("", Point(3, 3)) == 0

    def test_crlf_lines(self) -> None:
        text = "a\r\nbc\r\n"
        assert text[character_index_for_point(text, Point(1, 1))] == "c"

    def test_form_feed_does_not_start_a_row(self) -> None:
        text = "package x\x0c// c\nvar y = 1\n"

        index = character_index_for_point(text, Point(1, 4))

        assert text[index] == "y"
        assert encode_offset(text, index) == 19

    def test_line_separator_does_not_start_a_row(self) -> None:
        text = "// a\u2028b\nfoo()\n"

        index = character_index_for_point(text, Point(1, 0))

        assert text[index:index + 3] == "foo"
        assert encode_offset(text, index) == 9


class TestWordRangeAt:
    """Word detection for the landing highlight."""

    def test_qualified_identifier(self) -> None:
        line = "\tfmt.Println(x)"
        span = word_range_at(line, Point(4, 3))
        assert span == Range(Point(4, 1), Point(4, 12))
        assert line[span.start.column:span.end.column] == "fmt.Println"

    def test_cursor_at_word_end(self) -> None:
        span = word_range_at("foo bar", Point(0, 3))
        assert (span.start.column, span.end.column) == (0, 3)

    def test_no_word_gives_empty_range(self) -> None:
        span = word_range_at("   ", Point(0, 1))
        assert span.is_empty
        assert span.start == Point(0, 1)
