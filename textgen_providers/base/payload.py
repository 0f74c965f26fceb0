"""Request body construction for chat-completions endpoints.

Two payload shapes exist. The zhipu family receives a minimal body without a
system message and always carries ``max_tokens``. Every other vendor receives
the OpenAI-compatible body with the writing-assistant persona; there
``max_tokens`` is omitted when the caller leaves it unset. The asymmetry is
vendor-mandated.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from .constants import (
    DEFAULT_SYSTEM_PROMPT,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
    ZHIPU_FALLBACK_MAX_TOKENS,
)
from .vendor import Vendor, VendorClass, classify_vendor


def clamp_temperature(temperature: Optional[float]) -> float:
    """Clamp ``temperature`` into ``[0, 2]`` (``None`` becomes ``0``)."""
    if temperature is None:
        return TEMPERATURE_MIN
    return max(TEMPERATURE_MIN, min(TEMPERATURE_MAX, float(temperature)))


def _user_message(prompt: str) -> Dict[str, str]:
    return {"role": "user", "content": prompt}


def build_messages(prompt: str, vendor_class: VendorClass, system_prompt: str = DEFAULT_SYSTEM_PROMPT) -> List[Dict[str, str]]:
    """Return the ``messages`` array for ``vendor_class``."""
    if vendor_class.is_zhipu_family:
        return [_user_message(prompt)]
    return [{"role": "system", "content": system_prompt}, _user_message(prompt)]


def build_request_body(
    vendor: Union[str, Vendor, VendorClass],
    model: str,
    prompt: str,
    temperature: Optional[float],
    max_tokens: Optional[int],
    stream: bool = False,
) -> Dict[str, Any]:
    """Build the JSON payload for one chat-completions request.

    Parameters:
        vendor: Vendor string/enum or a ``VendorClass`` computed for the call.
            A bare ``custom`` vendor is treated as zhipu family when ``model``
            starts with ``glm-``.
        model: Target model identifier.
        prompt: User prompt text.
        temperature: Sampling temperature; clamped to ``[0, 2]``.
        max_tokens: Completion limit; ``<= 0`` (or ``None``) means "unset".
        stream: Whether server-sent event streaming is requested.

    Returns:
        A mapping ready for JSON serialization. Key order follows the vendor
        documentation so logged payloads read naturally.
    """
    vc = classify_vendor(vendor, "", model)
    temp = clamp_temperature(temperature)
    limit = int(max_tokens) if max_tokens is not None else 0
    messages = build_messages(prompt, vc)

    if vc.is_zhipu_family:
        return {
            "model": model,
            "messages": messages,
            "temperature": temp,
            "max_tokens": limit if limit > 0 else ZHIPU_FALLBACK_MAX_TOKENS,
            "stream": bool(stream),
        }

    payload: Dict[str, Any] = {"model": model, "temperature": temp}
    if limit > 0:
        payload["max_tokens"] = limit
    payload["stream"] = bool(stream)
    payload["messages"] = messages
    return payload


__all__ = ["build_request_body", "build_messages", "clamp_temperature"]
