"""Headless workspace managing open buffers and the active editor."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .buffer import BufferEditor

__all__ = ["HeadlessWorkspace", "ActiveEditorListener"]

LOGGER = logging.getLogger(__name__)

ActiveEditorListener = Callable[[Optional[BufferEditor]], None]


def _normalize_path(path: Path | str) -> Path:
    return Path(path).expanduser().resolve()


class HeadlessWorkspace:
    """:class:`~navigator_go.editor.protocols.EditorHost` backed by :class:`BufferEditor`.

    Files are read from disk on first open and reused afterwards, mirroring
    how a desktop editor re-focuses an existing tab instead of opening a
    duplicate.
    """

    def __init__(
        self,
        *,
        project_paths: Iterable[Path | str] = (),
        source_scope: str = "source.go",
        source_extension: str = ".go",
    ) -> None:
        self._project_paths: List[Path] = [_normalize_path(path) for path in project_paths]
        self._source_scope = source_scope
        self._source_extension = source_extension
        self._editors: Dict[Path, BufferEditor] = {}
        self._order: List[Path] = []
        self._active: BufferEditor | None = None
        self._listeners: List[ActiveEditorListener] = []

    # ------------------------------------------------------------------
    # EditorHost protocol
    # ------------------------------------------------------------------
    @property
    def project_paths(self) -> Sequence[Path]:
        return tuple(self._project_paths)

    def active_editor(self) -> Optional[BufferEditor]:
        return self._active

    def is_source_file(self, editor: BufferEditor) -> bool:
        if editor.scope_name == self._source_scope:
            return True
        path = editor.path
        return path is not None and path.suffix == self._source_extension

    async def open_file(self, path: Path | str) -> BufferEditor:
        """Open (or re-focus) ``path`` and make it the active editor."""

        resolved = _normalize_path(path)
        editor = self._editors.get(resolved)
        if editor is None:
            text = await asyncio.to_thread(resolved.read_text, encoding="utf-8", errors="replace")
            editor = BufferEditor(text, path=resolved)
            self._editors[resolved] = editor
            self._order.append(resolved)
            LOGGER.debug("Opened %s (%d chars)", resolved, len(text))
        self._activate(editor)
        return editor

    # ------------------------------------------------------------------
    # Workspace helpers
    # ------------------------------------------------------------------
    def add_editor(self, editor: BufferEditor, *, make_active: bool = True) -> BufferEditor:
        """Register an already-built buffer (e.g. an unsaved document)."""

        if editor.path is not None:
            resolved = _normalize_path(editor.path)
            self._editors[resolved] = editor
            if resolved not in self._order:
                self._order.append(resolved)
        if make_active or self._active is None:
            self._activate(editor)
        return editor

    def add_project_path(self, path: Path | str) -> None:
        resolved = _normalize_path(path)
        if resolved not in self._project_paths:
            self._project_paths.append(resolved)

    def editor_for(self, path: Path | str) -> Optional[BufferEditor]:
        return self._editors.get(_normalize_path(path))

    def close_all(self) -> None:
        self._editors.clear()
        self._order.clear()
        self._activate(None)

    def add_active_listener(self, listener: ActiveEditorListener) -> None:
        self._listeners.append(listener)

    def remove_active_listener(self, listener: ActiveEditorListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    @property
    def open_paths(self) -> tuple[Path, ...]:
        return tuple(self._order)

    def _activate(self, editor: BufferEditor | None) -> None:
        if editor is self._active:
            return
        self._active = editor
        for listener in list(self._listeners):
            listener(editor)
