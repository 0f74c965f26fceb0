"""textgen_providers package

Vendor-agnostic text-generation client with a persistent provider store.

Purpose:
    Send prompts to OpenAI-compatible, Azure-style, OpenRouter, zhipu and
    custom chat-completions endpoints through one call, and keep the user's
    provider profiles in a migrating SQLite store with a JSON backup.

Public API (re-exported):
    - Version: ``__version__``
    - Client: :class:`CompletionClient`, :class:`ConnectionProbe`
    - Store: :class:`ConfigStore`
    - Model: :class:`AppSettings`, :class:`ProviderConfig`,
      :class:`GenerationDefaults`, :class:`FeatureFlags`, :class:`Vendor`
    - Errors: :class:`ProviderError`, :class:`ErrorCode`,
      :class:`ConfigurationError`, :class:`UpstreamError`,
      :class:`DecodeError`, :class:`CancelledError`
    - Cancellation: :class:`CancellationToken`
    - Factory: :func:`create_client`
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import (
    ConfigurationError,
    DecodeError,
    ErrorCode,
    ProviderError,
    UpstreamError,
)
from .base.logging import ProviderLogger
from .base.models import AppSettings, FeatureFlags, GenerationDefaults, ProviderConfig
from .base.vendor import Vendor
from .client import CompletionClient, ConnectionProbe
from .persistence import ConfigStore

__version__ = "0.1.0"


def create_client(
    db_path: Optional[Union[str, Path]] = None,
    backup_path: Optional[Union[str, Path]] = None,
    *,
    logger: Optional[ProviderLogger] = None,
    normalize_text: bool = False,
) -> CompletionClient:
    """Create a ``CompletionClient`` backed by a ``ConfigStore``.

    Paths default to the configured store locations (see
    ``textgen_providers.config.get_store_config``). The same logger is shared
    by the store and the client.
    """
    store = ConfigStore(db_path, backup_path, logger=logger)
    return CompletionClient(store, logger=logger, normalize_text=normalize_text)


__all__ = [
    "__version__",
    "AppSettings",
    "CancellationToken",
    "CancelledError",
    "CompletionClient",
    "ConfigStore",
    "ConfigurationError",
    "ConnectionProbe",
    "DecodeError",
    "ErrorCode",
    "FeatureFlags",
    "GenerationDefaults",
    "ProviderConfig",
    "ProviderError",
    "UpstreamError",
    "Vendor",
    "create_client",
]
