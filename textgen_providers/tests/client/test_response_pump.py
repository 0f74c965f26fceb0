"""Worker-thread HTTP exchange tests."""

from __future__ import annotations

import threading

import httpx

from textgen_providers.client.response_pump import END, ERROR, INTERRUPTED, LINE, RESPONSE, ResponsePump


class _StallingStream(httpx.SyncByteStream):
    def __init__(self, release: threading.Event) -> None:
        self.release = release
        self.closed = False

    def __iter__(self):
        yield b"first\n"
        self.release.wait(5)
        yield b"second\n"

    def close(self) -> None:
        self.closed = True


def _pump(handler, *, lines: bool) -> ResponsePump:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return ResponsePump(client, client.build_request("POST", "https://example.test/chat"), lines=lines)


def test_line_mode_queues_response_lines_and_end():
    pump = _pump(lambda r: httpx.Response(200, content=b"a\nb\n"), lines=True).start()
    kind, resp = pump.get()
    assert (kind, resp.status_code) == (RESPONSE, 200)  # nosec B101
    assert [pump.get() for _ in range(3)] == [(LINE, "a"), (LINE, "b"), (END, None)]  # nosec B101


def test_error_status_in_line_mode_reads_the_body():
    pump = _pump(lambda r: httpx.Response(500, text="boom"), lines=True).start()
    kind, resp = pump.get()
    assert (kind, resp.status_code, resp.text) == (RESPONSE, 500, "boom")  # nosec B101
    assert pump.get() == (END, None)  # nosec B101


def test_transport_failure_is_queued():
    def fail(request):
        raise httpx.ConnectError("refused", request=request)

    pump = _pump(fail, lines=False).start()
    kind, err = pump.get()
    assert kind == ERROR and isinstance(err, httpx.ConnectError)  # nosec B101


def test_interrupt_wakes_a_blocked_consumer_and_stop_closes_late_response():
    release = threading.Event()
    stream = _StallingStream(release)
    pump = _pump(lambda r: httpx.Response(200, stream=stream), lines=True).start()
    assert pump.get()[0] == RESPONSE  # nosec B101
    assert pump.get() == (LINE, "first")  # nosec B101

    threading.Timer(0.05, pump.interrupt).start()
    assert pump.get() == (INTERRUPTED, None)  # nosec B101

    pump.stop()
    release.set()
    assert pump.join(2)  # nosec B101
    assert stream.closed  # nosec B101
