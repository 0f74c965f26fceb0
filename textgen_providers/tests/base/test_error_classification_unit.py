from __future__ import annotations

import types

import httpx

from textgen_providers.base.errors import (
    ConfigurationError,
    ErrorCode,
    ProviderError,
    UpstreamError,
    classify_exception,
    code_for_status,
)


def test_classify_provider_error_passthrough():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests
    assert classify_exception(ConfigurationError("bad")) is ErrorCode.CONFIGURATION  # nosec B101


def test_classify_http_status_mapping():
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101 - assert is appropriate in unit tests
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101 - assert is appropriate in unit tests


def test_classify_httpx_transport_errors():
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.UNAVAILABLE  # nosec B101


def test_classify_heuristics():
    assert classify_exception(Exception("timed out waiting")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101


def test_upstream_error_carries_status_and_body():
    err = UpstreamError(429, '{"error": "slow down"}', provider="p", code=code_for_status(429))
    assert err.code is ErrorCode.RATE_LIMIT  # nosec B101
    assert err.status_code == 429 and err.body == '{"error": "slow down"}'  # nosec B101
    assert code_for_status(418) is ErrorCode.UPSTREAM  # nosec B101
