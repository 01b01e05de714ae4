"""Capability interfaces the navigator consumes from its host editor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Sequence

from ..positions import Point, Range

__all__ = [
    "Disposable",
    "CompositeDisposable",
    "CursorListener",
    "TextEditor",
    "EditorHost",
]

LOGGER = logging.getLogger(__name__)


class CursorListener(Protocol):
    """Callback fired with the new cursor position after it moves."""

    def __call__(self, position: Point) -> None:  # pragma: no cover - protocol
        ...


class Disposable:
    """Handle releasing a subscription or resource exactly once."""

    __slots__ = ("_callback", "_disposed")

    def __init__(self, callback: Callable[[], None] | None = None) -> None:
        self._callback = callback
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        callback, self._callback = self._callback, None
        if callback is not None:
            callback()


class CompositeDisposable(Disposable):
    """Group of disposables released together."""

    __slots__ = ("_children",)

    def __init__(self, children: Iterable[Disposable] = ()) -> None:
        super().__init__(self._dispose_children)
        self._children: list[Disposable] = list(children)

    def add(self, child: Disposable) -> Disposable:
        if self.disposed:
            child.dispose()
        else:
            self._children.append(child)
        return child

    def remove(self, child: Disposable) -> None:
        try:
            self._children.remove(child)
        except ValueError:
            pass

    def __len__(self) -> int:
        return len(self._children)

    def _dispose_children(self) -> None:
        children, self._children = self._children, []
        for child in children:
            try:
                child.dispose()
            except Exception:
                LOGGER.exception("Failed to dispose %r", child)


class TextEditor(Protocol):
    """One open buffer with its cursors."""

    @property
    def path(self) -> Optional[Path]:
        ...

    @property
    def scope_name(self) -> str:
        ...

    def get_text(self) -> str:
        ...

    def get_cursor_position(self) -> Point:
        """Position of the last (primary) cursor."""
        ...

    def cursor_count(self) -> int:
        ...

    def line_text(self, row: int) -> str:
        ...

    def set_cursor(self, position: Point) -> None:
        ...

    def scroll_to(self, position: Point) -> None:
        ...

    def highlight_range(
        self, span: Range, on_dispose: Callable[[], None] | None = None
    ) -> Disposable:
        """Decorate ``span`` until the returned handle is disposed."""
        ...

    def on_cursor_moved(self, callback: CursorListener) -> Disposable:
        ...


class EditorHost(Protocol):
    """Workspace-level editor operations."""

    @property
    def project_paths(self) -> Sequence[Path]:
        ...

    def active_editor(self) -> Optional[TextEditor]:
        ...

    def is_source_file(self, editor: TextEditor) -> bool:
        ...

    async def open_file(self, path: Path | str) -> TextEditor:
        ...
