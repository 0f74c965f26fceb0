"""Endpoint resolution: (vendor, base URL) to the concrete request URL.

Pure string manipulation, no I/O. Resolution never fails: anything not
recognized falls back to using the base URL literally. Resolving an already
resolved URL returns it unchanged.
"""

from __future__ import annotations

from typing import Union

from .constants import (
    CHAT_COMPLETIONS_PATH,
    OPENAI_DEFAULT_SUFFIX,
    OPENAI_VERSIONED_ROOTS,
    ZHIPU_API_ROOT,
    ZHIPU_COMPLETIONS_PATH,
)
from .vendor import Vendor, VendorClass, VendorKind, classify_vendor


def _resolve_zhipu(url: str) -> str:
    trimmed = url.rstrip("/")
    lowered = trimmed.lower()
    if lowered.endswith(ZHIPU_COMPLETIONS_PATH) or ZHIPU_API_ROOT in lowered:
        return url
    return trimmed + ZHIPU_COMPLETIONS_PATH


def _resolve_openai_compatible(url: str) -> str:
    trimmed = url.rstrip("/")
    lowered = trimmed.lower()
    if lowered.endswith(CHAT_COMPLETIONS_PATH):
        return url
    if lowered.endswith(OPENAI_VERSIONED_ROOTS):
        return trimmed + CHAT_COMPLETIONS_PATH
    return trimmed + OPENAI_DEFAULT_SUFFIX


def resolve_endpoint(vendor: Union[str, Vendor, VendorClass], base_url: str) -> str:
    """Map a vendor and base URL to the chat-completions request URL.

    Parameters:
        vendor: Vendor string/enum, or a ``VendorClass`` computed earlier in
            the call (preferred; avoids re-classification).
        base_url: Configured base URL.

    Returns:
        The request URL. Surrounding whitespace is always removed; trailing
        slashes are removed whenever a suffix is appended.

    Rules (priority order):
        1. zhipu family on the zhipu cloud: keep URLs already ending in the
           completions path or containing the ``/api/paas/v4`` root, else
           append ``/api/paas/v4/chat/completions``.
        2. OpenAI-compatible: keep ``.../chat/completions``; append
           ``/chat/completions`` to ``/v1`` or ``/api/v1`` roots; otherwise
           append ``/v1/chat/completions``.
        3. Azure and opaque custom endpoints: the base URL is the endpoint.
    """
    url = (base_url or "").strip()
    if not url:
        return url
    vc = classify_vendor(vendor, url)
    if vc.opaque_endpoint:
        return url
    if vc.route_kind is VendorKind.ZHIPU:
        return _resolve_zhipu(url)
    if vc.route_kind is VendorKind.OPENAI_COMPATIBLE:
        return _resolve_openai_compatible(url)
    return url


__all__ = ["resolve_endpoint"]
