"""Fixtures building completion clients on mock transports."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from textgen_providers.base.models import GenerationDefaults, ProviderConfig
from textgen_providers.client import CompletionClient

OPENAI_KEY = "sk-test-1234567890abcd"


@pytest.fixture()
def openai_provider() -> ProviderConfig:
    return ProviderConfig(
        name="Default",
        vendor="openai",
        api_key=OPENAI_KEY,
        base_url="https://api.openai.com/v1",
        default_model="gpt-4o-mini",
    )


@pytest.fixture()
def client_for(mock_http, recording_logger) -> Callable[..., CompletionClient]:
    """Return ``build(provider, handler, **kw)``; ``client.http`` is the mock client."""

    def build(
        provider: ProviderConfig,
        handler: Callable[[httpx.Request], httpx.Response],
        defaults: Optional[GenerationDefaults] = None,
        **kwargs,
    ) -> CompletionClient:
        http = mock_http(handler)
        client = CompletionClient.for_provider(
            provider, defaults, logger=recording_logger, http_client=http, **kwargs
        )
        client.http = http  # type: ignore[attr-defined]
        return client

    return build
