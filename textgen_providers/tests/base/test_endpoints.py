"""Unit tests for chat-completions endpoint resolution."""
from __future__ import annotations

import pytest

from textgen_providers.base.endpoints import resolve_endpoint
from textgen_providers.base.vendor import classify_vendor


@pytest.mark.parametrize(
    "vendor,base_url,expected",
    [
        ("openai", "https://api.openai.com/v1", "https://api.openai.com/v1/chat/completions"),
        ("openai", "https://api.openai.com/v1/", "https://api.openai.com/v1/chat/completions"),
        ("openai", "https://api.openai.com", "https://api.openai.com/v1/chat/completions"),
        ("openai", "https://API.OPENAI.COM/V1", "https://API.OPENAI.COM/V1/chat/completions"),
        ("openai", "https://api.openai.com/v1/chat/completions", "https://api.openai.com/v1/chat/completions"),
        ("openrouter", "https://openrouter.ai/api/v1", "https://openrouter.ai/api/v1/chat/completions"),
        ("zhipu", "https://open.bigmodel.cn", "https://open.bigmodel.cn/api/paas/v4/chat/completions"),
        ("zhipu", "https://open.bigmodel.cn/", "https://open.bigmodel.cn/api/paas/v4/chat/completions"),
        ("zhipu", "https://open.bigmodel.cn/api/paas/v4", "https://open.bigmodel.cn/api/paas/v4"),
        (
            "zhipu",
            "https://open.bigmodel.cn/api/paas/v4/chat/completions",
            "https://open.bigmodel.cn/api/paas/v4/chat/completions",
        ),
        ("custom", "https://open.bigmodel.cn", "https://open.bigmodel.cn/api/paas/v4/chat/completions"),
        ("custom", "http://localhost:8080/generate", "http://localhost:8080/generate"),
        (
            "azure",
            "https://res.openai.azure.com/openai/deployments/d/chat/completions?api-version=2024-02-01",
            "https://res.openai.azure.com/openai/deployments/d/chat/completions?api-version=2024-02-01",
        ),
    ],
)
def test_resolve_endpoint(vendor, base_url, expected):
    assert resolve_endpoint(vendor, base_url) == expected  # nosec B101 - pytest assert in tests


def test_surrounding_whitespace_is_removed():
    url = "  https://api.openai.com/v1/chat/completions \n"
    assert resolve_endpoint("openai", url) == "https://api.openai.com/v1/chat/completions"  # nosec B101


def test_empty_base_url_resolves_to_empty():
    assert resolve_endpoint("openai", "") == ""  # nosec B101
    assert resolve_endpoint("zhipu", "   ") == ""  # nosec B101


def test_custom_glm_model_keeps_literal_url():
    vc = classify_vendor("custom", "http://gpu-box:9000/v1", "glm-4")
    assert resolve_endpoint(vc, "http://gpu-box:9000/v1") == "http://gpu-box:9000/v1"  # nosec B101


@pytest.mark.parametrize(
    "vendor,base_url",
    [
        ("openai", "https://api.openai.com"),
        ("openrouter", "https://openrouter.ai/api/v1/"),
        ("zhipu", "https://open.bigmodel.cn"),
        ("azure", "https://res.openai.azure.com/x"),
        ("custom", "http://localhost:1234"),
    ],
)
def test_resolution_is_idempotent(vendor, base_url):
    once = resolve_endpoint(vendor, base_url)
    assert resolve_endpoint(vendor, once) == once  # nosec B101
