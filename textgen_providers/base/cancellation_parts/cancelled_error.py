"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of a completion call. Kept isolated to satisfy one-class-per-file policy.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when a completion call is cancelled cooperatively.

    Distinct from every ``ProviderError``: a cancelled streaming call never
    returns its partial text as a success, and the client does not log it as
    a failure.
    """

__all__ = ["CancelledError"]
