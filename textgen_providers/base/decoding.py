"""Text extraction from non-streaming chat-completions responses.

``extract_response_text`` distinguishes "nothing extractable" (``None``) from
a legitimately empty completion (``""``); ``decode_response_text`` collapses
both to ``""`` for callers that only want text.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union


def _first_choice(data: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], Mapping):
        return choices[0]
    return None


def _as_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def parse_json_object(payload: Union[str, bytes, Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Return ``payload`` as a mapping, or ``None`` when it is not a JSON object."""
    if isinstance(payload, Mapping):
        return payload
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def extract_response_text(payload: Union[str, bytes, Mapping[str, Any]]) -> Optional[str]:
    """Extract generated text from a full response payload.

    Fields tried in order (first string wins):
        1. ``choices[0].message.content``
        2. ``choices[0].message.reasoning_content`` (zhipu)
        3. ``choices[0].text``
        4. top-level ``content``
        5. top-level ``text``

    Returns:
        The text, or ``None`` when the payload is not a JSON object or no
        known field matched.
    """
    data = parse_json_object(payload)
    if data is None:
        return None
    choice = _first_choice(data)
    if choice is not None:
        message = choice.get("message")
        if isinstance(message, Mapping):
            for key in ("content", "reasoning_content"):
                text = _as_text(message.get(key))
                if text is not None:
                    return text
        text = _as_text(choice.get("text"))
        if text is not None:
            return text
    for key in ("content", "text"):
        text = _as_text(data.get(key))
        if text is not None:
            return text
    return None


def decode_response_text(payload: Union[str, bytes, Mapping[str, Any]]) -> str:
    """Like :func:`extract_response_text` but returns ``""`` instead of ``None``."""
    return extract_response_text(payload) or ""


__all__ = ["extract_response_text", "decode_response_text", "parse_json_object"]
