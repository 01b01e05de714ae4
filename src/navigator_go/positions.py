"""Conversions between editor cursor positions and tool addressing.

Editors address text by 0-based (row, column) in characters; the definition
tool addresses source by UTF-8 byte offset on input and reports 1-based
``row:col`` on output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "Point",
    "Range",
    "encode_offset",
    "decode_position",
    "character_index_for_point",
    "word_range_at",
]

SOURCE_ENCODING = "utf-8"
# Identifiers plus package qualifiers (``fmt.Println``) count as one word.
WORD_PATTERN = re.compile(r"[\w+.]+")


@dataclass(frozen=True, slots=True)
class Point:
    """0-based editor position."""

    row: int = 0
    column: int = 0

    def as_tuple(self) -> tuple[int, int]:
        return (self.row, self.column)


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open span between two points on the same buffer."""

    start: Point
    end: Point

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


def encode_offset(text: str, cursor_index: int) -> int:
    """Return the UTF-8 byte length of ``text`` preceding ``cursor_index``.

    ``cursor_index`` is a character index and is clamped to the text bounds.
    """

    index = max(0, min(int(cursor_index), len(text)))
    return len(text[:index].encode(SOURCE_ENCODING))


def decode_position(row: str | int | None, column: str | int | None) -> Point | None:
    """Convert the tool's 1-based row/column tokens into a 0-based :class:`Point`.

    Returns ``None`` when either token is missing, empty, or not an integer.
    """

    parsed_row = _parse_component(row)
    parsed_column = _parse_component(column)
    if parsed_row is None or parsed_column is None:
        return None
    return Point(max(0, parsed_row - 1), max(0, parsed_column - 1))


def character_index_for_point(text: str, point: Point) -> int:
    """Translate an editor point into a character index within ``text``.

    Rows are split on ``\n`` only, matching the editor buffer. Rows past the end clamp to the end of the text; columns clamp to the
    length of their line.
    """

    lines = text.split("\n")
    row = max(0, point.row)
    if row >= len(lines):
        return len(text)
    index = sum(len(line) + 1 for line in lines[:row])
    content = lines[row].rstrip("\r")
    return index + max(0, min(point.column, len(content)))


def word_range_at(line: str, point: Point) -> Range:
    """Return the word touching ``point`` on ``line`` (empty range when none)."""

    for match in WORD_PATTERN.finditer(line):
        if match.start() <= point.column <= match.end():
            return Range(Point(point.row, match.start()), Point(point.row, match.end()))
        if match.start() > point.column:
            break
    return Range(point, point)


def _parse_component(value: str | int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    token = value.strip()
    if not token:
        return None
    try:
        return int(token, 10)
    except ValueError:
        return None
