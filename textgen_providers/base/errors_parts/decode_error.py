"""
Decode error for a single malformed streaming line.

Streaming decoding is best-effort per line: this error is raised by the line
translator and recovered by the stream decoder, which logs and skips the
offending line. It is not expected to reach callers of the completion client.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class DecodeError(ProviderError):
    """Malformed JSON payload in a server-sent event data line."""

    def __init__(self, message: str, line: str = "", raw: Optional[Exception] = None) -> None:
        super().__init__(code=ErrorCode.DECODE, message=message, raw=raw)
        self.line = line


__all__ = ["DecodeError"]
