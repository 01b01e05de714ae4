"""Typed event bus connecting the navigator to its host UI.

The navigator never talks to a notification widget directly; it publishes
events here and the host decides how (or whether) to render them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Generic, TypeVar
from weakref import WeakMethod

LOGGER = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all navigator events."""


@dataclass(slots=True)
class WarningPosted(Event):
    """A warning the user should see.

    Attributes:
        title: Notification source, e.g. ``"navigator-go"``.
        detail: One-line summary of the problem.
        description: Optional extra context (offending path, raw tool output).
        icon: Icon name hint for the host.
        dismissable: Whether the user must dismiss the notification.
    """

    title: str
    detail: str
    description: str | None = None
    icon: str = "location"
    dismissable: bool = True


@dataclass(slots=True)
class DefinitionVisited(Event):
    """Emitted after the editor landed on a resolved definition."""

    path: str
    row: int | None = None
    column: int | None = None


@dataclass(slots=True)
class LocationRestored(Event):
    """Emitted after ``goto-definition-return`` re-opened a previous location."""

    path: str
    row: int
    column: int
    remaining: int


@dataclass(slots=True)
class ToolInstallFinished(Event):
    """Emitted when the one-shot background install attempt completes."""

    tool_name: str
    success: bool
    command: str | None = None


class EventBus(Generic[E]):
    """Publish/subscribe bus dispatching events by exact type.

    Bound-method handlers are held weakly so a disposed component does not
    keep receiving events. Handler exceptions are logged and never propagate
    to the publisher. Not thread-safe: publish from the event loop thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        self._handlers[event_type].append(_HandlerRef.create(handler))
        LOGGER.debug("Subscribed %s to %s", _handler_name(handler), event_type.__name__)

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""

        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        for index, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(index)
                return

    def publish(self, event: E) -> None:
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        if not handlers:
            LOGGER.debug("No handlers for %s", event_type.__name__)
            return

        dead: list[_HandlerRef] = []
        for handler_ref in list(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                dead.append(handler_ref)
                continue
            try:
                handler(event)
            except Exception:
                LOGGER.exception(
                    "Handler %s raised for %s", _handler_name(handler), event_type.__name__
                )
        for handler_ref in dead:
            handlers.remove(handler_ref)

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference for everything else."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: Any, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref
        return self._ref()

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        return resolved is not None and resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        return f"{type(handler.__self__).__name__}.{handler.__func__.__name__}"
    return getattr(handler, "__name__", repr(handler))


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "WarningPosted",
    "DefinitionVisited",
    "LocationRestored",
    "ToolInstallFinished",
]
