"""Unit tests for request body construction."""
from __future__ import annotations

from textgen_providers.base.constants import DEFAULT_SYSTEM_PROMPT
from textgen_providers.base.payload import build_request_body, clamp_temperature


def test_openai_body_shape_and_key_order():
    body = build_request_body("openai", "gpt-4o-mini", "Write a poem", 0.7, 256, stream=False)
    assert list(body) == ["model", "temperature", "max_tokens", "stream", "messages"]  # nosec B101
    assert body["messages"] == [  # nosec B101
        {"role": "system", "content": DEFAULT_SYSTEM_PROMPT},
        {"role": "user", "content": "Write a poem"},
    ]
    assert body["max_tokens"] == 256 and body["stream"] is False  # nosec B101


def test_openai_body_omits_unset_max_tokens():
    assert "max_tokens" not in build_request_body("openrouter", "m", "p", 0.5, 0)  # nosec B101
    assert "max_tokens" not in build_request_body("azure", "m", "p", 0.5, None)  # nosec B101


def test_zhipu_body_has_no_system_message_and_always_max_tokens():
    body = build_request_body("zhipu", "glm-4.6", "hi", 0.9, 0, stream=True)
    assert body == {  # nosec B101
        "model": "glm-4.6",
        "messages": [{"role": "user", "content": "hi"}],
        "temperature": 0.9,
        "max_tokens": 2048,
        "stream": True,
    }


def test_custom_vendor_with_glm_model_uses_zhipu_body():
    body = build_request_body("custom", "glm-4-flash", "hi", 0.3, 100)
    assert body["messages"] == [{"role": "user", "content": "hi"}]  # nosec B101
    assert body["max_tokens"] == 100  # nosec B101


def test_temperature_is_clamped_for_every_vendor():
    assert build_request_body("openai", "m", "p", 5.0, 1)["temperature"] == 2.0  # nosec B101
    assert build_request_body("zhipu", "m", "p", -1.0, 1)["temperature"] == 0.0  # nosec B101
    assert clamp_temperature(None) == 0.0  # nosec B101
    assert clamp_temperature(1.25) == 1.25  # nosec B101
