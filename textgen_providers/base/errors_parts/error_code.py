"""
Normalized provider error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the completion client, the
configuration store and the error classification helpers. Values are
lowercase snake_case and are considered a stable public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    CONFIGURATION = "configuration"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    DECODE = "decode"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    UPSTREAM = "upstream"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
