"""Server-sent event decoding for streaming chat completions.

Purpose:
- ``translate_text_from_line`` turns one SSE line into a text fragment. It is
  strict: malformed JSON raises :class:`DecodeError`.
- :class:`StreamDecoder` is the per-stream state machine
  (``AWAITING_LINE -> HAVE_DATA_LINE -> DONE``). It is lenient: a decode error
  is logged and the line skipped, so one vendor quirk never takes down an
  otherwise-working stream.

Notes:
- No I/O happens here; the completion client feeds lines read from
  ``httpx.Response.iter_lines()``.
- Fragments are returned verbatim. Markdown is neither interpreted nor
  stripped at this layer.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from .constants import SSE_DATA_PREFIX, SSE_DONE_SENTINEL
from .errors import DecodeError
from .logging import LogContext, LogLevel, ProviderLogger, log_event

_DONE = object()


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _data_payload(resp_line: Union[str, bytes, None]) -> Optional[str]:
    """Return the payload of a ``data:`` line, or ``None`` for other lines."""
    if not resp_line:
        return None
    line = resp_line.decode("utf-8", errors="replace") if isinstance(resp_line, bytes) else str(resp_line)
    line = line.strip()
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    return line[len(SSE_DATA_PREFIX):].strip()


def extract_fragment(chunk: Mapping[str, Any]) -> str:
    """Extract the text fragment carried by one parsed stream chunk.

    Fields tried in order (first string wins):
        1. ``choices[0].delta.content``
        2. ``choices[0].delta.reasoning_content`` (zhipu)
        3. ``choices[0].content``
        4. top-level ``content``

    Returns:
        The fragment, or ``""`` when nothing matched (not an error).
    """
    choices = chunk.get("choices")
    choice = choices[0] if isinstance(choices, list) and choices and isinstance(choices[0], Mapping) else None
    if choice is not None:
        delta = choice.get("delta")
        if isinstance(delta, Mapping):
            for key in ("content", "reasoning_content"):
                text = _as_text(delta.get(key))
                if text is not None:
                    return text
        text = _as_text(choice.get("content"))
        if text is not None:
            return text
    return _as_text(chunk.get("content")) or ""


def _translate(resp_line: Union[str, bytes, None]):
    payload = _data_payload(resp_line)
    if payload is None:
        return None
    if payload == SSE_DONE_SENTINEL:
        return _DONE
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise DecodeError(f"malformed stream line: {e}", line=payload, raw=e) from e
    if not isinstance(data, dict):
        raise DecodeError("stream line is not a JSON object", line=payload)
    return extract_fragment(data)


def translate_text_from_line(resp_line: Union[str, bytes, None]) -> Optional[str]:
    """Translate an SSE line into a text fragment.

    Parameters:
        resp_line: Raw line emitted by ``httpx.Response.iter_lines()``
            (``str`` or ``bytes``).

    Returns:
        The fragment (possibly ``""``) for a data line; ``None`` for blank
        lines, non-data lines and the ``[DONE]`` sentinel.

    Raises:
        DecodeError: The data payload is not a JSON object.
    """
    result = _translate(resp_line)
    return None if result is _DONE else result


def is_done_line(resp_line: Union[str, bytes, None]) -> bool:
    """Return ``True`` when ``resp_line`` carries the ``[DONE]`` sentinel."""
    return _data_payload(resp_line) == SSE_DONE_SENTINEL


class StreamState(str, Enum):
    """States of :class:`StreamDecoder`."""

    AWAITING_LINE = "awaiting_line"
    HAVE_DATA_LINE = "have_data_line"
    DONE = "done"


class StreamDecoder:
    """Incremental SSE decoder for one streaming response.

    Feed lines in arrival order; each data line yields at most one fragment.
    ``[DONE]`` ends the stream regardless of anything decoded before it, and
    lines fed afterwards are ignored.
    """

    def __init__(self, logger: Optional[ProviderLogger] = None, ctx: Optional[LogContext] = None) -> None:
        self._logger = logger
        self._ctx = ctx
        self.state = StreamState.AWAITING_LINE
        self.decode_errors = 0
        self.fragments = 0

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    def feed(self, resp_line: Union[str, bytes, None]) -> Optional[str]:
        """Consume one line.

        Returns:
            The decoded fragment for a valid data line (``""`` when the chunk
            carries no known text field); ``None`` when the line was skipped,
            malformed, the sentinel, or arrived after ``DONE``.
        """
        if self.state is StreamState.DONE:
            return None
        try:
            result = _translate(resp_line)
        except DecodeError as e:
            self.decode_errors += 1
            if self._logger is not None:
                log_event(
                    self._logger,
                    "stream.decode_error",
                    self._ctx,
                    level=LogLevel.WARN,
                    source="StreamDecoder",
                    code=e.code.value,
                    error=e.message,
                    line=e.line[:200],
                )
            self.state = StreamState.AWAITING_LINE
            return None
        if result is None:
            self.state = StreamState.AWAITING_LINE
            return None
        if result is _DONE:
            self.state = StreamState.DONE
            return None
        self.state = StreamState.HAVE_DATA_LINE
        self.fragments += 1
        return result

    def iter_fragments(self, lines: Iterable[Union[str, bytes]]) -> Iterator[str]:
        """Yield fragments from ``lines`` until ``DONE`` or exhaustion."""
        for line in lines:
            fragment = self.feed(line)
            if fragment is not None:
                yield fragment
            if self.done:
                return


__all__ = [
    "StreamDecoder",
    "StreamState",
    "extract_fragment",
    "is_done_line",
    "translate_text_from_line",
]
