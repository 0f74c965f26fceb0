"""
Upstream (HTTP status) error type.

Raised when the vendor endpoint answers with a non-2xx status. The raw body
is carried verbatim so callers can surface the vendor's own explanation.
"""
from __future__ import annotations

from typing import Optional

from .error_code import ErrorCode
from .provider_error import ProviderError


class UpstreamError(ProviderError):
    """Non-success HTTP status returned by the vendor endpoint.

    Attributes:
        status_code: HTTP status code of the response.
        body: Raw response body text (not truncated).
    """

    def __init__(
        self,
        status_code: int,
        body: str,
        provider: str = "",
        model: Optional[str] = None,
        code: Optional[ErrorCode] = None,
    ) -> None:
        super().__init__(
            code=code or ErrorCode.UPSTREAM,
            message=f"upstream returned HTTP {status_code}",
            provider=provider,
            model=model,
        )
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{super().__str__()}\n{self.body}"


__all__ = ["UpstreamError"]
