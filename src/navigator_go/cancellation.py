"""Cancellation tokens threaded through a definition request."""

from __future__ import annotations

from typing import Callable

from .errors import RequestCancelledError

__all__ = ["CancellationToken"]


class CancellationToken:
    """Cooperative cancellation flag.

    A child token created with :meth:`child` is cancelled together with its
    parent, so disposing the navigator cancels every in-flight request.
    Call :meth:`close` on a finished child to detach it from its parent.
    """

    __slots__ = ("_cancelled", "_callbacks", "_reason", "_detach")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason = ""
        self._callbacks: list[Callable[[], None]] = []
        self._detach: Callable[[], None] | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` on cancellation (immediately if already cancelled)."""

        if self._cancelled:
            callback()
        else:
            self._callbacks.append(callback)

    def child(self) -> CancellationToken:
        token = CancellationToken()

        def _propagate() -> None:
            token.cancel(self._reason)

        self.on_cancel(_propagate)
        token._detach = lambda: self._discard(_propagate)
        return token

    def close(self) -> None:
        detach, self._detach = self._detach, None
        if detach is not None:
            detach()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError(message=f"request {self._reason}")

    def _discard(self, callback: Callable[[], None]) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass
