"""textgen_providers.config.defaults
================================

Central place for small, stable default values used across the package.
These defaults can be overridden via environment variables or an external
configuration file, but provide sensible fallbacks for local use and tests.

This module intentionally avoids importing from other package modules to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Provider profile defaults ----
# Synthesized when the store holds no provider at all.
DEFAULT_PROVIDER_NAME = "Default"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"

ZHIPU_DEFAULT_MODEL = "glm-4.6"

# Name given to the single provider carried over from the legacy shape.
LEGACY_PROVIDER_NAME = "Default"
# Naming pattern for providers added without an explicit name.
NEW_PROVIDER_NAME_TEMPLATE = "Provider{index}"

# ---- Generation defaults ----
DEFAULT_WORD_LIMIT = 500
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_USE_STREAMING = True

# ---- HTTP ----
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
# Timeout used by the connectivity probe.
PROBE_TIMEOUT_SECONDS = 5.0
PROBE_PREVIEW_CHARS = 200
# Truncation applied to headers/bodies in log events.
LOG_TRUNCATE_CHARS = 500

# ---- Storage ----
DEFAULT_STORE_DIR_NAME = ".textgen_providers"
DEFAULT_DB_FILE_NAME = "settings.db"
DEFAULT_BACKUP_FILE_NAME = "appsettings.client.json"

# ---- SQLite config (infrastructure) ----
# Standard busy timeout to mitigate lock contention (milliseconds).
SQLITE_BUSY_TIMEOUT_MS = 5000
# Journal and sync mode optimized for local use and light concurrency.
SQLITE_JOURNAL_MODE = "WAL"
SQLITE_SYNCHRONOUS = "NORMAL"


__all__ = [
    "DEFAULT_PROVIDER_NAME",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "ZHIPU_DEFAULT_MODEL",
    "LEGACY_PROVIDER_NAME",
    "NEW_PROVIDER_NAME_TEMPLATE",
    "DEFAULT_WORD_LIMIT",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USE_STREAMING",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "PROBE_TIMEOUT_SECONDS",
    "PROBE_PREVIEW_CHARS",
    "LOG_TRUNCATE_CHARS",
    "DEFAULT_STORE_DIR_NAME",
    "DEFAULT_DB_FILE_NAME",
    "DEFAULT_BACKUP_FILE_NAME",
    "SQLITE_BUSY_TIMEOUT_MS",
    "SQLITE_JOURNAL_MODE",
    "SQLITE_SYNCHRONOUS",
]
