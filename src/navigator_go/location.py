"""Parsing of the definition tool's JSON location report.

The tool prints a single JSON object whose ``objpos`` field reads
``<path>:<row>:<col>`` with 1-based row and column. Parsing is pure: malformed
input yields a :class:`Location` without ``filepath`` instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from json import JSONDecodeError
from typing import Any, Union

from jsonschema import Draft7Validator

from .positions import Point, decode_position

__all__ = [
    "Location",
    "Parsed",
    "Unparsed",
    "ParseResult",
    "OBJPOS_SCHEMA",
    "parse_payload",
    "parse_objpos",
    "parse_definition",
]

LOGGER = logging.getLogger(__name__)

OBJPOS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["objpos"],
    "properties": {"objpos": {"type": "string", "minLength": 1}},
}
_VALIDATOR = Draft7Validator(OBJPOS_SCHEMA)


@dataclass(frozen=True, slots=True)
class Location:
    """Where the tool says a definition lives.

    ``filepath`` is ``None`` for malformed output. ``position`` is only set
    when ``objpos`` carried a well-formed ``file:row:col`` triple.
    """

    raw: str
    filepath: str | None = None
    position: Point | None = None

    @property
    def is_malformed(self) -> bool:
        return not self.filepath


@dataclass(frozen=True, slots=True)
class Parsed:
    """Envelope that decoded and carries an ``objpos`` string."""

    objpos: str
    raw: str


@dataclass(frozen=True, slots=True)
class Unparsed:
    """Envelope that failed to decode or lacks ``objpos``."""

    raw: str
    reason: str


ParseResult = Union[Parsed, Unparsed]


def parse_payload(stdout: str) -> ParseResult:
    """Decode the tool's stdout into a tagged :data:`ParseResult`."""

    raw = stdout or ""
    try:
        data = json.loads(raw)
    except (JSONDecodeError, TypeError) as exc:
        return Unparsed(raw=raw, reason=f"invalid JSON: {exc}")
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda error: list(error.path))
    if errors:
        return Unparsed(raw=raw, reason=errors[0].message)
    return Parsed(objpos=data["objpos"], raw=raw)


def parse_objpos(objpos: str, *, raw: str) -> Location:
    """Split ``path:row:col`` from the right so colons inside the path survive."""

    tokens = objpos.strip().split(":")
    row: str | None = None
    column: str | None = None
    if len(tokens) >= 2:
        column = tokens.pop()
        row = tokens.pop()
    filepath = ":".join(tokens)
    position = decode_position(row, column)
    if position is None and _has_text_token(row, column):
        # Trailing tokens were not numeric: they belong to the path.
        filepath = objpos.strip()
    return Location(raw=raw, filepath=filepath or None, position=position)


def parse_definition(stdout: str) -> Location:
    """Parse the tool's stdout into a :class:`Location`."""

    result = parse_payload(stdout)
    if isinstance(result, Unparsed):
        LOGGER.debug("Definition output not usable (%s): %r", result.reason, result.raw)
        return Location(raw=result.raw)
    return parse_objpos(result.objpos, raw=result.raw)


def _has_text_token(*tokens: str | None) -> bool:
    return any(token and not token.strip().isdigit() for token in tokens)
