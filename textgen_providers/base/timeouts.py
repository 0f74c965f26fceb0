"""Unified timeout configuration for outbound HTTP.

This module centralizes the timeout values used by the completion client.
The per-request read timeout normally comes from the provider's generation
defaults (``timeout_seconds``); this module supplies the connect timeout and
the fallback applied when a profile leaves the request timeout unset.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values (seconds).

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use and whenever the relevant variables change. Supported
    environment variables (all optional):
        TEXTGEN_TIMEOUT_CONNECT_SECONDS
        TEXTGEN_TIMEOUT_REQUEST_SECONDS

build_httpx_timeout(seconds)
    Converts a request timeout into an ``httpx.Timeout``.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

from ..config.defaults import DEFAULT_CONNECT_TIMEOUT_SECONDS, DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Upper bound for establishing a connection.
        request_timeout_seconds: Fallback read/write timeout used when the
            provider profile does not configure a positive value.
    """

    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    request_timeout_seconds: float = float(DEFAULT_TIMEOUT_SECONDS)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None
_ENV_VARS = ("TEXTGEN_TIMEOUT_CONNECT_SECONDS", "TEXTGEN_TIMEOUT_REQUEST_SECONDS")


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float with a fallback."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached ``TimeoutConfig`` instance."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_VARS)
    if _CACHED is not None and guard == _ENV_GUARD:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float("TEXTGEN_TIMEOUT_CONNECT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS),
        request_timeout_seconds=_parse_env_float("TEXTGEN_TIMEOUT_REQUEST_SECONDS", float(DEFAULT_TIMEOUT_SECONDS)),
    )
    _ENV_GUARD = guard
    return _CACHED


def effective_request_timeout(seconds: float | int | None) -> float:
    """Return ``seconds`` when positive, else the configured fallback (120s)."""
    if seconds is not None and seconds > 0:
        return float(seconds)
    return get_timeout_config().request_timeout_seconds


def build_httpx_timeout(seconds: float | int | None) -> httpx.Timeout:
    """Build an ``httpx.Timeout`` for one request.

    The read/write/pool phases use the provider timeout; connecting is bounded
    by the (smaller) connect timeout.
    """
    total = effective_request_timeout(seconds)
    cfg = get_timeout_config()
    return httpx.Timeout(total, connect=min(cfg.connect_timeout_seconds, total))


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "effective_request_timeout",
    "build_httpx_timeout",
]
