"""Common helpers for the completion client.

Purpose:
    Keep call preparation (provider snapshot, validation, endpoint, body,
    headers, timeout) and log redaction out of the main client module.

Notes:
    These helpers assume the consumer provides ``_store`` (anything with a
    ``load() -> AppSettings`` method) and ``_logger`` (a ``ProviderLogger``).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from ..base.constants import (
    MISSING_API_KEY_ERROR,
    MISSING_BASE_URL_ERROR,
    NO_PROVIDER_SELECTED_ERROR,
)
from ..base.endpoints import resolve_endpoint
from ..base.errors import ConfigurationError
from ..base.logging import LogContext
from ..base.models import AppSettings, GenerationDefaults, ProviderConfig
from ..base.payload import build_request_body
from ..base.timeouts import build_httpx_timeout
from ..base.vendor import VendorClass
from ..config.defaults import LOG_TRUNCATE_CHARS

_SECRET_HEADERS = ("authorization", "api-key")


def mask_api_key(api_key: Optional[str]) -> str:
    """Mask a credential to its first 4 and last 4 characters."""
    if not api_key:
        return ""
    if len(api_key) <= 8:
        return "*" * len(api_key)
    return f"{api_key[:4]}...{api_key[-4:]}"


def truncate(text: str, limit: int = LOG_TRUNCATE_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "...(truncated)"


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Return a copy of ``headers`` with credential values masked."""
    redacted: Dict[str, str] = {}
    for name, value in headers.items():
        if name.lower() not in _SECRET_HEADERS:
            redacted[name] = value
        elif value.startswith("Bearer "):
            redacted[name] = "Bearer " + mask_api_key(value[len("Bearer "):])
        else:
            redacted[name] = mask_api_key(value)
    return redacted


def build_headers(vendor_class: VendorClass, api_key: str) -> Dict[str, str]:
    """Build request headers for ``vendor_class``.

    Azure authenticates with ``api-key`` and never receives ``Authorization``;
    every other vendor gets a bearer token when a key is present. The zhipu
    family additionally asks for JSON explicitly.
    """
    headers = {"Content-Type": "application/json"}
    key = (api_key or "").strip()
    if key:
        if vendor_class.uses_bearer_auth:
            headers["Authorization"] = f"Bearer {key}"
        else:
            headers["api-key"] = key
    if vendor_class.is_zhipu_family:
        headers["Accept"] = "application/json"
    return headers


@dataclass(frozen=True)
class PreparedCall:
    """Everything one completion request needs, computed up front."""

    provider: ProviderConfig
    vendor_class: VendorClass
    model: str
    url: str
    headers: Dict[str, str]
    body: Dict[str, Any]
    timeout: httpx.Timeout
    ctx: LogContext


class FixedSettingsSource:
    """Settings source returning one fixed snapshot (no persistence)."""

    def __init__(self, settings: AppSettings) -> None:
        self._settings = settings

    def load(self) -> AppSettings:
        return self._settings


class ClientHelpersMixin:
    """Mixin offering call preparation and log-friendly summaries."""

    def _active_provider(self, settings: AppSettings) -> ProviderConfig:
        provider = settings.selected_provider()
        if provider is None:
            raise ConfigurationError(NO_PROVIDER_SELECTED_ERROR, provider=settings.selected_provider_name)
        return provider

    def _prepare_call(
        self,
        prompt: str,
        temperature: Optional[float],
        max_tokens: Optional[int],
        stream: bool,
    ) -> PreparedCall:
        """Snapshot the active provider and build the request.

        Raises:
            ConfigurationError: no resolvable provider, empty base URL, or a
                missing API key for a vendor that requires one.
        """
        settings = self._store.load()
        provider = self._active_provider(settings)
        defaults: GenerationDefaults = settings.generation_defaults
        if not provider.base_url.strip():
            raise ConfigurationError(MISSING_BASE_URL_ERROR, provider=provider.name, model=provider.default_model)
        vc = provider.classify()
        if vc.requires_api_key and not provider.api_key.strip():
            raise ConfigurationError(MISSING_API_KEY_ERROR, provider=provider.name, model=provider.default_model)

        model = provider.default_model
        url = resolve_endpoint(vc, provider.base_url)
        body = build_request_body(
            vc,
            model,
            prompt,
            defaults.temperature if temperature is None else temperature,
            defaults.max_tokens if max_tokens is None else max_tokens,
            stream=stream,
        )
        ctx = LogContext(provider=provider.name, vendor=vc.vendor.value, model=model, endpoint=url)
        return PreparedCall(
            provider=provider,
            vendor_class=vc,
            model=model,
            url=url,
            headers=build_headers(vc, provider.api_key),
            body=body,
            timeout=build_httpx_timeout(defaults.timeout_seconds),
            ctx=ctx,
        )

    def _request_summary(self, call: PreparedCall) -> Dict[str, Any]:
        """Return redacted, truncated request fields for a start event."""
        return {
            "kind": call.vendor_class.kind.value,
            "headers": truncate(json.dumps(redact_headers(call.headers), ensure_ascii=False)),
            "body": truncate(json.dumps(call.body, ensure_ascii=False)),
        }


__all__ = [
    "ClientHelpersMixin",
    "FixedSettingsSource",
    "PreparedCall",
    "build_headers",
    "mask_api_key",
    "redact_headers",
    "truncate",
]
