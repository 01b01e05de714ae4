"""User-facing warning notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .events import EventBus, WarningPosted

__all__ = ["Notification", "Notifier", "EventBusNotifier", "LoggingNotifier", "NOTIFICATION_TITLE"]

LOGGER = logging.getLogger(__name__)

NOTIFICATION_TITLE = "navigator-go"


@dataclass(frozen=True, slots=True)
class Notification:
    """Fields of a warning shown by the host's notification layer."""

    detail: str
    description: str | None = None
    title: str = NOTIFICATION_TITLE
    icon: str = "location"
    dismissable: bool = True


class Notifier(Protocol):
    """Sink the navigator hands warnings to."""

    def add_warning(self, notification: Notification) -> None:  # pragma: no cover - protocol
        ...


class EventBusNotifier:
    """Publishes warnings as :class:`~navigator_go.events.WarningPosted` events."""

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus

    def add_warning(self, notification: Notification) -> None:
        self._bus.publish(
            WarningPosted(
                title=notification.title,
                detail=notification.detail,
                description=notification.description,
                icon=notification.icon,
                dismissable=notification.dismissable,
            )
        )


class LoggingNotifier:
    """Fallback used when no host notification layer is wired up."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def add_warning(self, notification: Notification) -> None:
        if notification.description:
            self._logger.warning("%s: %s (%s)", notification.title, notification.detail, notification.description)
        else:
            self._logger.warning("%s: %s", notification.title, notification.detail)
