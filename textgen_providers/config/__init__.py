"""Unified configuration layer for the configuration store.

Goals
-----
* Centralize defaults (storage locations, SQLite busy timeout).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Environment variables (TEXTGEN_DB_PATH, TEXTGEN_BACKUP_PATH, ...)
    3. Optional external config file (JSON or YAML) pointed to by TEXTGEN_CONFIG_FILE
    4. In-code overrides passed to helper
* Provide a single call site: ``get_store_config(overrides=None)``.

External Config File (Optional)
-------------------------------
If TEXTGEN_CONFIG_FILE is set to a path, we attempt to load JSON first and
fall back to YAML. Structure example:

```
store:
  db_path: ~/novels/settings.db
  backup_path: ~/novels/appsettings.client.json
  busy_timeout_ms: 8000
```

Public API
----------
* get_store_config(overrides: dict | None = None) -> StoreConfig
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    DEFAULT_BACKUP_FILE_NAME,
    DEFAULT_DB_FILE_NAME,
    DEFAULT_STORE_DIR_NAME,
    SQLITE_BUSY_TIMEOUT_MS,
)


ENV_FIELD_MAP = {
    "db_path": "TEXTGEN_DB_PATH",
    "backup_path": "TEXTGEN_BACKUP_PATH",
    "busy_timeout_ms": "TEXTGEN_SQLITE_BUSY_TIMEOUT_MS",
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_FILE_CACHE_KEY: Optional[str] = None


@dataclass(frozen=True)
class StoreConfig:
    """Resolved locations and tuning for the configuration store."""

    db_path: Path
    backup_path: Path
    busy_timeout_ms: int = SQLITE_BUSY_TIMEOUT_MS


def _default_store_dir() -> Path:
    return Path.home() / DEFAULT_STORE_DIR_NAME


def _load_external_config() -> Dict[str, Any]:
    """Load and cache the optional JSON/YAML config file.

    The cache is keyed by the file path so tests may point
    ``TEXTGEN_CONFIG_FILE`` elsewhere between calls.
    """
    global _FILE_CACHE, _FILE_CACHE_KEY
    path = os.getenv("TEXTGEN_CONFIG_FILE", "")
    if _FILE_CACHE is not None and _FILE_CACHE_KEY == path:
        return _FILE_CACHE
    data: Dict[str, Any] = {}
    p = Path(path).expanduser() if path else None
    if p is not None and p.is_file():
        text = p.read_text(encoding="utf-8")
        try:
            loaded = json.loads(text)
        except json.JSONDecodeError:
            loaded = yaml.safe_load(text)
        if isinstance(loaded, dict):
            data = loaded
    _FILE_CACHE = data
    _FILE_CACHE_KEY = path
    return data


def reset_config_cache() -> None:
    """Forget the cached external config file (primarily for tests)."""
    global _FILE_CACHE, _FILE_CACHE_KEY
    _FILE_CACHE = None
    _FILE_CACHE_KEY = None


def get_store_config(overrides: Optional[Dict[str, Any]] = None) -> StoreConfig:
    """Return the merged store configuration.

    Parameters:
        overrides: Optional mapping with ``db_path``, ``backup_path`` and/or
            ``busy_timeout_ms``; non-``None`` values win over every other
            source.

    Returns:
        A frozen :class:`StoreConfig`. When only ``db_path`` is configured,
        the backup file defaults to a sibling of the database file.
    """
    merged: Dict[str, Any] = {}
    file_section = _load_external_config().get("store") or {}
    if isinstance(file_section, dict):
        merged.update({k: v for k, v in file_section.items() if k in ENV_FIELD_MAP and v not in (None, "")})
    for field_name, env_name in ENV_FIELD_MAP.items():
        val = os.getenv(env_name)
        if val:
            merged[field_name] = val
    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    db_path = Path(merged["db_path"]).expanduser() if merged.get("db_path") else _default_store_dir() / DEFAULT_DB_FILE_NAME
    if merged.get("backup_path"):
        backup_path = Path(merged["backup_path"]).expanduser()
    else:
        backup_path = db_path.parent / DEFAULT_BACKUP_FILE_NAME
    try:
        busy_timeout_ms = int(merged.get("busy_timeout_ms", SQLITE_BUSY_TIMEOUT_MS))
    except (TypeError, ValueError):
        busy_timeout_ms = SQLITE_BUSY_TIMEOUT_MS
    if busy_timeout_ms <= 0:
        busy_timeout_ms = SQLITE_BUSY_TIMEOUT_MS
    return StoreConfig(db_path=db_path, backup_path=backup_path, busy_timeout_ms=busy_timeout_ms)


__all__ = ["StoreConfig", "get_store_config", "reset_config_cache"]
