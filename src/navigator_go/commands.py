"""Command surface exposed to the host editor (keybindings, palette)."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Union

from .editor.protocols import Disposable

__all__ = [
    "CommandRegistry",
    "CommandHandler",
    "UnknownCommandError",
    "GODEF_COMMAND",
    "RETURN_COMMAND",
    "CLEAR_HISTORY_COMMAND",
    "register_commands",
]

LOGGER = logging.getLogger(__name__)

GODEF_COMMAND = "golang:godef"
RETURN_COMMAND = "golang:godef-return"
CLEAR_HISTORY_COMMAND = "golang:godef-clear-history"

CommandHandler = Callable[[], Union[Awaitable[Any], Any]]


class UnknownCommandError(KeyError):
    """Raised when dispatching a command nobody registered."""


class CommandRegistry:
    """Maps command names to handlers; the latest registration wins."""

    def __init__(self) -> None:
        self._handlers: Dict[str, list[CommandHandler]] = {}

    def register(self, name: str, handler: CommandHandler) -> Disposable:
        handlers = self._handlers.setdefault(name, [])
        handlers.append(handler)

        def _unregister() -> None:
            current = self._handlers.get(name)
            if not current:
                return
            try:
                current.remove(handler)
            except ValueError:
                return
            if not current:
                del self._handlers[name]

        return Disposable(_unregister)

    def has(self, name: str) -> bool:
        return bool(self._handlers.get(name))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._handlers))

    async def dispatch(self, name: str) -> Any:
        handlers = self._handlers.get(name)
        if not handlers:
            raise UnknownCommandError(name)
        LOGGER.debug("Dispatching %s", name)
        result = handlers[-1]()
        if inspect.isawaitable(result):
            result = await result
        return result


def register_commands(navigator: Any, registry: CommandRegistry) -> None:
    """Register the navigator's commands; they are removed when it is disposed."""

    async def _godef() -> bool:
        if not navigator.ready():
            LOGGER.debug("%s ignored: navigator not ready", GODEF_COMMAND)
            return False
        return await navigator.goto_definition_for_word_at_cursor()

    async def _return() -> bool:
        return await navigator.return_to_previous_location()

    def _clear() -> None:
        navigator.clear_return_history()

    navigator.subscriptions.add(registry.register(GODEF_COMMAND, _godef))
    navigator.subscriptions.add(registry.register(RETURN_COMMAND, _return))
    navigator.subscriptions.add(registry.register(CLEAR_HISTORY_COMMAND, _clear))
