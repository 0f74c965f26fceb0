"""Shared helpers for building fake vendor responses in tests."""

from __future__ import annotations

import json


def sse_body(*payloads: object, done: bool = True) -> bytes:
    """Build a server-sent event body from JSON-able payloads or raw strings."""
    lines = []
    for p in payloads:
        data = p if isinstance(p, str) else json.dumps(p)
        lines.append(f"data: {data}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def chat_chunk(text: str) -> dict:
    return {"choices": [{"delta": {"content": text}}]}


def chat_response(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}
