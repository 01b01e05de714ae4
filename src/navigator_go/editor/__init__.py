"""Editor collaborator interfaces and the headless in-memory editor."""

from .buffer import BufferEditor, HighlightMarker, scope_for_path
from .protocols import CompositeDisposable, CursorListener, Disposable, EditorHost, TextEditor
from .workspace import HeadlessWorkspace

__all__ = [
    "BufferEditor",
    "CompositeDisposable",
    "CursorListener",
    "Disposable",
    "EditorHost",
    "HeadlessWorkspace",
    "HighlightMarker",
    "TextEditor",
    "scope_for_path",
]
