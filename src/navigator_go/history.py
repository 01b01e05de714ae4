"""Return history for definition jumps."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock

from .editor.protocols import EditorHost
from .events import EventBus, LocationRestored
from .positions import Point

__all__ = ["NavigationEntry", "NavigationStack"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NavigationEntry:
    """Where the user was before a jump."""

    path: Path
    position: Point


class NavigationStack:
    """Unbounded LIFO stack of pre-jump locations.

    Entries are captured from the host's active editor and restored by asking
    the host to re-open the file. Mutations are guarded by a lock so a
    multi-threaded host can share one stack.
    """

    def __init__(self, host: EditorHost, *, bus: EventBus | None = None) -> None:
        self._host = host
        self._bus = bus
        self._entries: list[NavigationEntry] = []
        self._lock = Lock()

    def push_current_location(self) -> NavigationEntry | None:
        """Record the active editor's file and cursor.

        Nothing is pushed when there is no active editor or it has no path.
        """

        editor = self._host.active_editor()
        if editor is None or editor.path is None:
            LOGGER.debug("No active file location to record")
            return None
        entry = NavigationEntry(path=Path(editor.path), position=editor.get_cursor_position())
        self.push(entry)
        return entry

    def push(self, entry: NavigationEntry) -> None:
        with self._lock:
            self._entries.append(entry)
            depth = len(self._entries)
        LOGGER.debug("Pushed %s:%s (depth=%d)", entry.path, entry.position.as_tuple(), depth)

    def pop(self) -> NavigationEntry | None:
        with self._lock:
            if not self._entries:
                return None
            return self._entries.pop()

    async def restore_previous_location(self) -> NavigationEntry | None:
        """Pop the most recent entry and move the editor back to it.

        Returns ``None`` (and does nothing) when the stack is empty.
        """

        entry = self.pop()
        if entry is None:
            return None
        editor = await self._host.open_file(entry.path)
        editor.scroll_to(entry.position)
        editor.set_cursor(entry.position)
        if self._bus is not None:
            self._bus.publish(
                LocationRestored(
                    path=str(entry.path),
                    row=entry.position.row,
                    column=entry.position.column,
                    remaining=len(self),
                )
            )
        return entry

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
        LOGGER.debug("Navigation history cleared")

    @property
    def entries(self) -> tuple[NavigationEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
