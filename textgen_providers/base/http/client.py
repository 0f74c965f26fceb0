"""Shared HTTP client pool for the completion client.

Purpose:
    Provide a centralized, thread-safe pool of reusable ``httpx.Client``
    instances so concurrent completion calls share connections instead of
    allocating a client per request.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - A pooled client carries the fallback timeout from
      :func:`get_timeout_config`. Each request still passes its own
      ``httpx.Timeout`` built from the provider's ``timeout_seconds``, which
      takes precedence.

Lifecycle & cleanup:
    - Clients are cached by ``purpose`` (e.g. "chat", "stream", "probe").
      Requests always use absolute URLs, so no base URL is bound.
    - All clients are closed at interpreter exit via ``atexit``. Tests may
      also call :func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import contextlib
import threading
from typing import Dict

import httpx

from ..timeouts import build_httpx_timeout

_CLIENTS: Dict[str, httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(purpose: str) -> httpx.Client:
    """Return the pooled ``httpx.Client`` for ``purpose``.

    The first request for a purpose creates the client; subsequent requests
    reuse the same instance. Safe for concurrent use.
    """
    client = _CLIENTS.get(purpose)
    if client is not None:
        return client

    with _LOCK:
        client = _CLIENTS.get(purpose)
        if client is not None:
            return client
        client = httpx.Client(timeout=build_httpx_timeout(None))
        _CLIENTS[purpose] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            # Best-effort shutdown; pool teardown failures are not actionable.
            with contextlib.suppress(Exception):
                c.close()
        _CLIENTS.clear()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
