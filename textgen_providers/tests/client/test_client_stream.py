"""Streaming completion tests (SSE over a mock transport)."""

from __future__ import annotations

import threading
import time

import httpx
import pytest

from textgen_providers.base.cancellation import CancellationToken, CancelledError
from textgen_providers.base.errors import ErrorCode, UpstreamError
from textgen_providers.tests.utils import chat_chunk, sse_body


def _sse(body: bytes):
    return lambda request: httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})


def test_fragments_are_delivered_in_order(client_for, openai_provider, recording_logger):
    client = client_for(openai_provider, _sse(sse_body(chat_chunk("Hel"), chat_chunk("lo"), chat_chunk(" there"))))
    seen = []
    assert client.generate_stream("p", on_fragment=seen.append) == "Hello there"  # nosec B101
    assert seen == ["Hel", "lo", " there"]  # nosec B101
    assert client.http.recorded[0].json["stream"] is True  # nosec B101
    (end,) = recording_logger.events("stream.end")
    assert (end["emitted"], end["decode_errors"], end["done"]) == (3, 0, True)  # nosec B101


def test_malformed_line_is_skipped(client_for, openai_provider, recording_logger):
    client = client_for(openai_provider, _sse(sse_body(chat_chunk("a"), "{oops", chat_chunk("b"))))
    assert client.generate_stream("p") == "ab"  # nosec B101
    assert len(recording_logger.events("stream.decode_error")) == 1  # nosec B101
    assert recording_logger.events("stream.end")[0]["decode_errors"] == 1  # nosec B101


def test_empty_fragments_are_not_forwarded(client_for, openai_provider):
    body = sse_body({"choices": [{"delta": {"role": "assistant"}}]}, chat_chunk(""), chat_chunk("x"))
    client = client_for(openai_provider, _sse(body))
    seen = []
    assert client.generate_stream("p", on_fragment=seen.append) == "x"  # nosec B101
    assert seen == ["x"]  # nosec B101


def test_lines_after_done_are_ignored(client_for, openai_provider):
    body = sse_body(chat_chunk("a")) + sse_body(chat_chunk("late"), done=False)
    client = client_for(openai_provider, _sse(body))
    assert client.generate_stream("p") == "a"  # nosec B101


def test_stream_without_done_ends_with_body(client_for, openai_provider, recording_logger):
    client = client_for(openai_provider, _sse(sse_body(chat_chunk("a"), done=False)))
    assert client.generate_stream("p") == "a"  # nosec B101
    assert recording_logger.events("stream.end")[0]["done"] is False  # nosec B101


def test_reasoning_content_is_streamed(client_for, openai_provider):
    body = sse_body({"choices": [{"delta": {"reasoning_content": "think"}}]})
    client = client_for(openai_provider, _sse(body))
    assert client.generate_stream("p") == "think"  # nosec B101


def test_error_status_raises_with_body(client_for, openai_provider):
    client = client_for(openai_provider, lambda r: httpx.Response(429, text="slow down"))
    with pytest.raises(UpstreamError) as info:
        client.generate_stream("p")
    assert (info.value.status_code, info.value.body, info.value.code) == (429, "slow down", ErrorCode.RATE_LIMIT)  # nosec B101


def test_cancel_during_stream_raises_and_discards_text(client_for, openai_provider, recording_logger):
    body = sse_body(chat_chunk("one"), chat_chunk("two"), chat_chunk("three"))
    client = client_for(openai_provider, _sse(body))
    token = CancellationToken()
    seen = []

    def on_fragment(fragment):
        seen.append(fragment)
        token.cancel("enough")

    with pytest.raises(CancelledError):
        client.generate_stream("p", on_fragment=on_fragment, cancel=token)
    assert seen == ["one"]  # nosec B101
    assert recording_logger.events("stream.cancelled")  # nosec B101
    assert recording_logger.events("stream.end") == []  # nosec B101


def test_cancel_from_another_thread_interrupts_stalled_stream(client_for, openai_provider, recording_logger):
    release = threading.Event()

    def stalled_body():
        yield sse_body(chat_chunk("Hi"), done=False)
        release.wait(5)
        yield sse_body(chat_chunk("late"))

    def handler(request):
        return httpx.Response(200, content=stalled_body(), headers={"content-type": "text/event-stream"})

    client = client_for(openai_provider, handler)
    token = CancellationToken()
    seen = []
    timer = threading.Timer(0.3, token.cancel, args=("user stop",))
    t0 = time.monotonic()
    timer.start()
    try:
        with pytest.raises(CancelledError):
            client.generate_stream("p", on_fragment=seen.append, cancel=token)
        elapsed = time.monotonic() - t0
    finally:
        timer.cancel()
        release.set()
    assert seen == ["Hi"]  # nosec B101
    assert elapsed < 2.0  # nosec B101
    assert recording_logger.events("stream.cancelled")  # nosec B101
    assert recording_logger.events("stream.end") == []  # nosec B101


def test_iter_stream_yields_fragments(client_for, openai_provider):
    client = client_for(openai_provider, _sse(sse_body(chat_chunk("a"), chat_chunk("b"))))
    assert list(client.iter_stream("p")) == ["a", "b"]  # nosec B101


def test_normalization_applies_to_final_text_only(client_for, openai_provider):
    client = client_for(openai_provider, _sse(sse_body(chat_chunk("**bo"), chat_chunk("ld**"))), normalize_text=True)
    seen = []
    assert client.generate_stream("p", on_fragment=seen.append) == "bold"  # nosec B101
    assert seen == ["**bo", "ld**"]  # nosec B101
