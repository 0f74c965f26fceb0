"""
Structured provider error exception type.

Wraps failures of a completion call with a normalized `ErrorCode` for
consistent handling and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        provider: Provider profile name where the error originated.
        model: Optional model name associated with the failure.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str = ""
    model: Optional[str] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
