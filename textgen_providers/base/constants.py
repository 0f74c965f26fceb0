"""Wire-protocol constants shared by the endpoint, payload and decoder layers."""

from __future__ import annotations

# System persona sent to every vendor except the zhipu family.
DEFAULT_SYSTEM_PROMPT = "You are a helpful writing assistant."

# Vendor detection markers (matched case-insensitively).
ZHIPU_HOST_MARKER = "bigmodel.cn"
ZHIPU_MODEL_PREFIX = "glm-"
OPENAI_HOST_MARKERS = ("openai.com", "openrouter.ai")

# Endpoint shapes.
CHAT_COMPLETIONS_PATH = "/chat/completions"
OPENAI_VERSIONED_ROOTS = ("/v1", "/api/v1")
OPENAI_DEFAULT_SUFFIX = "/v1/chat/completions"
ZHIPU_API_ROOT = "/api/paas/v4"
ZHIPU_COMPLETIONS_PATH = ZHIPU_API_ROOT + CHAT_COMPLETIONS_PATH

# Zhipu requires max_tokens; used when the caller leaves it unset (<= 0).
ZHIPU_FALLBACK_MAX_TOKENS = 2048

TEMPERATURE_MIN = 0.0
TEMPERATURE_MAX = 2.0

# Server-sent events.
SSE_DATA_PREFIX = "data:"
SSE_DONE_SENTINEL = "[DONE]"

# Error messages.
NO_PROVIDER_SELECTED_ERROR = "No selected provider configured."
MISSING_BASE_URL_ERROR = "Base URL is not configured."
MISSING_API_KEY_ERROR = "API key is not configured (only custom providers may omit it)."

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "ZHIPU_HOST_MARKER",
    "ZHIPU_MODEL_PREFIX",
    "OPENAI_HOST_MARKERS",
    "CHAT_COMPLETIONS_PATH",
    "OPENAI_VERSIONED_ROOTS",
    "OPENAI_DEFAULT_SUFFIX",
    "ZHIPU_API_ROOT",
    "ZHIPU_COMPLETIONS_PATH",
    "ZHIPU_FALLBACK_MAX_TOKENS",
    "TEMPERATURE_MIN",
    "TEMPERATURE_MAX",
    "SSE_DATA_PREFIX",
    "SSE_DONE_SENTINEL",
    "NO_PROVIDER_SELECTED_ERROR",
    "MISSING_BASE_URL_ERROR",
    "MISSING_API_KEY_ERROR",
]
