"""In-memory text editor used by the CLI and tests."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..positions import Point, Range
from .protocols import CursorListener, Disposable

__all__ = ["BufferEditor", "HighlightMarker", "scope_for_path"]

LOGGER = logging.getLogger(__name__)

_SCOPES_BY_SUFFIX = {
    ".go": "source.go",
    ".mod": "go.mod",
    ".py": "source.python",
    ".md": "text.md",
}


def scope_for_path(path: Path | None) -> str:
    """Guess a grammar scope from the file extension."""

    if path is None:
        return "text.plain"
    return _SCOPES_BY_SUFFIX.get(path.suffix.lower(), "text.plain")


@dataclass(slots=True)
class HighlightMarker:
    """A decorated span living until disposed."""

    span: Range
    css_class: str = "definition"
    destroyed: bool = False


@dataclass(slots=True)
class _CursorSubscription:
    callback: CursorListener
    active: bool = True


class BufferEditor:
    """Headless :class:`~navigator_go.editor.protocols.TextEditor` implementation."""

    def __init__(
        self,
        text: str = "",
        *,
        path: Path | str | None = None,
        scope_name: str | None = None,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._text = text
        self._scope_name = scope_name or scope_for_path(self._path)
        self._cursors: list[Point] = [Point()]
        self._listeners: list[_CursorSubscription] = []
        self.markers: list[HighlightMarker] = []
        self.scroll_position: Point | None = None

    # ------------------------------------------------------------------
    # TextEditor protocol
    # ------------------------------------------------------------------
    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def scope_name(self) -> str:
        return self._scope_name

    def get_text(self) -> str:
        return self._text

    def get_cursor_position(self) -> Point:
        return self._cursors[-1]

    def cursor_count(self) -> int:
        return len(self._cursors)

    def line_text(self, row: int) -> str:
        lines = self._lines()
        if 0 <= row < len(lines):
            return lines[row]
        return ""

    def set_cursor(self, position: Point) -> None:
        """Collapse to a single cursor at ``position``."""

        clamped = self._clamp(position)
        previous = self._cursors[-1]
        self._cursors = [clamped]
        if clamped != previous:
            self._notify_cursor_moved(clamped)

    def scroll_to(self, position: Point) -> None:
        self.scroll_position = self._clamp(position)

    def highlight_range(
        self, span: Range, on_dispose: Callable[[], None] | None = None
    ) -> Disposable:
        marker = HighlightMarker(span=span)
        self.markers.append(marker)

        def _destroy() -> None:
            marker.destroyed = True
            try:
                self.markers.remove(marker)
            except ValueError:
                pass
            if on_dispose is not None:
                on_dispose()

        return Disposable(_destroy)

    def on_cursor_moved(self, callback: CursorListener) -> Disposable:
        subscription = _CursorSubscription(callback)
        self._listeners.append(subscription)

        def _unsubscribe() -> None:
            subscription.active = False
            try:
                self._listeners.remove(subscription)
            except ValueError:
                pass

        return Disposable(_unsubscribe)

    # ------------------------------------------------------------------
    # Buffer helpers
    # ------------------------------------------------------------------
    def set_text(self, text: str) -> None:
        self._text = text
        self._cursors = [self._clamp(cursor) for cursor in self._cursors]

    def add_cursor(self, position: Point) -> None:
        self._cursors.append(self._clamp(position))

    @property
    def cursors(self) -> tuple[Point, ...]:
        return tuple(self._cursors)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _clamp(self, position: Point) -> Point:
        lines = self._lines()
        row = max(0, min(position.row, len(lines) - 1))
        column = max(0, min(position.column, len(lines[row])))
        return Point(row, column)

    def _lines(self) -> list[str]:
        return [line.rstrip("\r") for line in self._text.split("\n")]

    def _notify_cursor_moved(self, position: Point) -> None:
        for subscription in list(self._listeners):
            if not subscription.active:
                continue
            try:
                subscription.callback(position)
            except Exception:
                LOGGER.exception("Cursor listener %r failed", subscription.callback)

    def __repr__(self) -> str:
        return f"BufferEditor(path={self._path!s}, cursors={len(self._cursors)})"
