"""
Configuration error raised before any network I/O takes place.

Covers a missing or unresolvable provider selection, an empty base URL, a
missing API key where the vendor requires one, and invalid edits to the
provider list (duplicate names, removing the last provider).
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class ConfigurationError(ProviderError):
    """Invalid or incomplete provider configuration. Never retried."""

    def __init__(self, message: str, provider: str = "", model: Optional[str] = None) -> None:
        super().__init__(code=ErrorCode.CONFIGURATION, message=message, provider=provider, model=model)


__all__ = ["ConfigurationError"]
