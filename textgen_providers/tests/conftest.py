"""Pytest configuration for the textgen_providers test suite.

Shared fixtures:
- ``recording_logger``: in-memory ``ProviderLogger`` capturing entries.
- ``store``: ``ConfigStore`` on per-test temporary paths.
- ``mock_http``: factory building an ``httpx.Client`` on ``MockTransport``
  that records every request it serves.
- Environment isolation: no test reads the developer's real config.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterator, List

import httpx
import pytest

from textgen_providers.base.http import close_all_clients
from textgen_providers.base.logging import RecordingLogger
from textgen_providers.config import reset_config_cache
from textgen_providers.persistence import ConfigStore

_ENV_VARS = (
    "TEXTGEN_DB_PATH",
    "TEXTGEN_BACKUP_PATH",
    "TEXTGEN_SQLITE_BUSY_TIMEOUT_MS",
    "TEXTGEN_CONFIG_FILE",
    "TEXTGEN_TIMEOUT_CONNECT_SECONDS",
    "TEXTGEN_TIMEOUT_REQUEST_SECONDS",
    "TEXTGEN_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Clear package env vars and point HOME at a temp dir for each test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture(scope="session", autouse=True)
def close_pooled_clients() -> Iterator[None]:
    yield
    close_all_clients()


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def store(tmp_path: Path, recording_logger: RecordingLogger) -> ConfigStore:
    return ConfigStore(tmp_path / "settings.db", tmp_path / "appsettings.client.json", logger=recording_logger)


class RecordedRequest:
    """Snapshot of one request served by the mock transport."""

    def __init__(self, request: httpx.Request) -> None:
        self.method = request.method
        self.url = str(request.url)
        self.headers = request.headers
        body = request.read()
        self.json = json.loads(body) if body else None


@pytest.fixture()
def mock_http() -> Iterator[Callable[..., httpx.Client]]:
    """Return ``make(handler) -> httpx.Client``; ``client.recorded`` lists requests."""
    clients: List[httpx.Client] = []

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        recorded: List[RecordedRequest] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            recorded.append(RecordedRequest(request))
            return handler(request)

        client = httpx.Client(transport=httpx.MockTransport(_handler))
        client.recorded = recorded  # type: ignore[attr-defined]
        clients.append(client)
        return client

    yield make
    for c in clients:
        c.close()
