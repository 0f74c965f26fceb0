"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose cancellation constructs via the canonical
``textgen_providers.base.cancellation`` import path while the concrete
implementations live under ``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is the single cancellation signal accepted by
  ``CompletionClient.generate`` and ``CompletionClient.generate_stream``.
- ``CancelledError`` is raised by operations that observe a cancellation
  request; it is never folded into a partial-success result.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
