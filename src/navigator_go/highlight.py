"""Transient highlight of the word the cursor landed on."""

from __future__ import annotations

import logging

from .editor.protocols import Disposable, TextEditor
from .positions import Point, Range, word_range_at

__all__ = ["TransientHighlight", "highlight_word_at_cursor"]

LOGGER = logging.getLogger(__name__)


class TransientHighlight(Disposable):
    """Highlight released on explicit dispose or the next cursor move.

    Whichever comes first wins; the cursor subscription unsubscribes itself
    so it fires at most once.
    """

    __slots__ = ("span", "_marker", "_subscription")

    def __init__(self, editor: TextEditor, span: Range) -> None:
        super().__init__(self._release)
        self.span = span
        self._marker: Disposable | None = editor.highlight_range(span)
        self._subscription: Disposable | None = editor.on_cursor_moved(self._on_cursor_moved)

    def _on_cursor_moved(self, position: Point) -> None:
        LOGGER.debug("Cursor moved to %s; clearing definition highlight", position.as_tuple())
        self.dispose()

    def _release(self) -> None:
        subscription, self._subscription = self._subscription, None
        marker, self._marker = self._marker, None
        if subscription is not None:
            subscription.dispose()
        if marker is not None:
            marker.dispose()


def highlight_word_at_cursor(editor: TextEditor) -> TransientHighlight:
    """Highlight the word under ``editor``'s cursor until the cursor moves."""

    cursor = editor.get_cursor_position()
    span = word_range_at(editor.line_text(cursor.row), cursor)
    return TransientHighlight(editor, span)
