"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class passed into ``generate`` and
``generate_stream``. Besides cooperative polling, the token runs registered
abort callbacks on cancel so a blocking read on another thread can be
interrupted (the client registers a callback that closes the in-flight
HTTP response).
"""

from __future__ import annotations

import contextlib
import threading
from typing import Callable, Dict, List

from .cancelled_error import CancelledError


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe. Child tokens inherit cancellation when the parent is
    cancelled. Callbacks registered through :meth:`on_cancel` run once, on
    the cancelling thread; a callback registered after cancellation runs
    immediately.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._event = threading.Event()
        self._reason: str | None = None
        self._lock = threading.Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._next_id = 0
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation, run abort callbacks and cascade to children."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            children = list(self._children)
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            # An abort hook failing must not prevent the others from running.
            with contextlib.suppress(Exception):
                callback()
        for child in children:
            child.cancel(reason)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register an abort callback; returns a function that unregisters it."""
        with self._lock:
            if not self._event.is_set():
                handle = self._next_id
                self._next_id += 1
                self._callbacks[handle] = callback
            else:
                handle = None
        if handle is None:
            with contextlib.suppress(Exception):
                callback()
            return lambda: None

        def _unregister() -> None:
            with self._lock:
                self._callbacks.pop(handle, None)

        return _unregister

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._event.is_set()
            reason = self._reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._event.is_set():
            raise CancelledError(self._reason or "operation cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return ``cancelled``."""
        return self._event.wait(timeout)

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self.cancelled}, "
            f"reason={self._reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
