"""Worker-thread driver for a single HTTP exchange.

The calling thread never blocks inside httpx: the request is sent, and the
body read (or its lines iterated), on a daemon worker thread that hands
every result over a queue. A cancellation token wakes the consumer by
pushing a sentinel into the same queue, so ``CancelledError`` surfaces as
soon as the token fires instead of when the server answers or the timeout
expires. An abandoned worker closes its response once its blocking call
returns.
"""

from __future__ import annotations

import contextlib
import queue
import threading
from typing import Any, Optional, Tuple

import httpx

RESPONSE = "response"
LINE = "line"
ERROR = "error"
END = "end"
INTERRUPTED = "interrupted"

Item = Tuple[str, Any]


class ResponsePump:
    """Send ``request`` on a worker thread and queue what comes back.

    Items are ``(kind, value)`` pairs, in order:

    - ``("response", httpx.Response)`` once headers arrive. In buffered
      mode, and for non-2xx statuses in line mode, the body has already
      been read.
    - ``("line", str)`` per body line (line mode, 2xx only).
    - ``("end", None)`` after the last item, or ``("error", exc)`` instead.

    ``("interrupted", None)`` is queued by :meth:`interrupt`.
    """

    def __init__(self, client: httpx.Client, request: httpx.Request, *, lines: bool) -> None:
        self._client = client
        self._request = request
        self._lines = lines
        self._queue: "queue.Queue[Item]" = queue.Queue()
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="textgen-http", daemon=True)

    def start(self) -> "ResponsePump":
        self._thread.start()
        return self

    def get(self) -> Item:
        """Block until the next item is available."""
        return self._queue.get()

    def interrupt(self) -> None:
        """Wake a consumer blocked in :meth:`get`."""
        self._queue.put((INTERRUPTED, None))

    def stop(self) -> None:
        """Abandon the exchange; the worker stops reading and closes the response."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to exit; return ``True`` when it did."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _run(self) -> None:
        try:
            resp = self._client.send(self._request, stream=True)
            try:
                if self._lines and resp.is_success:
                    self._queue.put((RESPONSE, resp))
                    for line in resp.iter_lines():
                        if self._stop.is_set():
                            break
                        self._queue.put((LINE, line))
                elif self._lines:
                    # Error bodies are best effort; an unreadable one is reported empty.
                    with contextlib.suppress(httpx.HTTPError):
                        resp.read()
                    self._queue.put((RESPONSE, resp))
                else:
                    resp.read()
                    self._queue.put((RESPONSE, resp))
            finally:
                resp.close()
        except Exception as e:  # noqa: BLE001 - handed to the consumer
            self._queue.put((ERROR, e))
        else:
            self._queue.put((END, None))


__all__ = ["ResponsePump", "Item", "RESPONSE", "LINE", "ERROR", "END", "INTERRUPTED"]
