"""Versioned schema migrations for the configuration store.

The schema version lives in ``PRAGMA user_version``. ``MIGRATIONS`` is an
ordered list of steps, each moving the database from ``version - 1`` to
``version``. ``migrate`` runs every step above the current version, one
transaction per step, bumping ``user_version`` inside the same transaction.

Schema generations
------------------
1. Legacy single-provider shape: one ``settings`` row that embeds the only
   provider (``vendor``, ``api_key``, ``base_url``, ``default_model``).
2. Multi-provider shape: a ``providers`` table plus
   ``settings.selected_provider_name``. The embedded legacy provider is copied
   over as ``Default`` when no provider exists yet.
3. Legacy provider columns removed from ``settings``.

Every step is idempotent: re-running one on an already-migrated database
changes nothing and never duplicates rows.
"""

from __future__ import annotations

import sqlite3
import uuid
from dataclasses import dataclass
from typing import Callable, List

from ...config.defaults import (
    LEGACY_PROVIDER_NAME,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
)
from .engine import table_columns

LEGACY_PROVIDER_COLUMNS = ("vendor", "api_key", "base_url", "default_model")

SETTINGS_COLUMNS_V3 = (
    "id",
    "api_base",
    "selected_provider_name",
    "streaming_enabled",
    "auto_save_enabled",
    "word_limit",
    "temperature",
    "max_tokens",
    "timeout_seconds",
    "use_streaming",
)


@dataclass(frozen=True)
class Migration:
    """One schema step (``version - 1 -> version``)."""

    version: int
    description: str
    apply: Callable[[sqlite3.Connection], None]


def create_legacy_settings(conn: sqlite3.Connection) -> None:
    """Step 1: the original single-provider settings table."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            api_base TEXT,
            streaming_enabled INTEGER NOT NULL DEFAULT 1,
            auto_save_enabled INTEGER NOT NULL DEFAULT 1,
            word_limit INTEGER NOT NULL DEFAULT 500,
            temperature REAL NOT NULL DEFAULT 0.7,
            max_tokens INTEGER NOT NULL DEFAULT 1024,
            timeout_seconds INTEGER NOT NULL DEFAULT 120,
            vendor TEXT,
            api_key TEXT,
            base_url TEXT,
            default_model TEXT
        );
        """
    )


def _legacy_provider_row(conn: sqlite3.Connection):
    cols = table_columns(conn, "settings")
    if not all(c in cols for c in LEGACY_PROVIDER_COLUMNS):
        return None
    row = conn.execute(
        "SELECT vendor, api_key, base_url, default_model FROM settings WHERE id = 1"
    ).fetchone()
    if row is None or not any(row[c] for c in LEGACY_PROVIDER_COLUMNS):
        return None
    return row


def add_providers_table(conn: sqlite3.Connection) -> None:
    """Step 2: multi-provider shape, carrying the legacy provider over."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS providers (
            name TEXT PRIMARY KEY,
            id TEXT NOT NULL,
            vendor TEXT NOT NULL,
            api_key TEXT NOT NULL DEFAULT '',
            base_url TEXT NOT NULL DEFAULT '',
            default_model TEXT NOT NULL DEFAULT '',
            position INTEGER NOT NULL DEFAULT 0
        );
        """
    )
    cols = table_columns(conn, "settings")
    if "selected_provider_name" not in cols:
        conn.execute("ALTER TABLE settings ADD COLUMN selected_provider_name TEXT NOT NULL DEFAULT ''")
    if "use_streaming" not in cols:
        conn.execute("ALTER TABLE settings ADD COLUMN use_streaming INTEGER NOT NULL DEFAULT 1")

    if conn.execute("SELECT COUNT(*) FROM providers").fetchone()[0]:
        return
    legacy = _legacy_provider_row(conn)
    if legacy is None:
        return
    conn.execute(
        "INSERT INTO providers(name, id, vendor, api_key, base_url, default_model, position) VALUES(?, ?, ?, ?, ?, ?, 0)",
        (
            LEGACY_PROVIDER_NAME,
            str(uuid.uuid4()),
            (legacy["vendor"] or "openai").strip().lower(),
            legacy["api_key"] or "",
            legacy["base_url"] or OPENAI_DEFAULT_BASE_URL,
            legacy["default_model"] or OPENAI_DEFAULT_MODEL,
        ),
    )
    conn.execute("UPDATE settings SET selected_provider_name = ? WHERE id = 1", (LEGACY_PROVIDER_NAME,))


def drop_legacy_columns(conn: sqlite3.Connection) -> None:
    """Step 3: rebuild ``settings`` without the embedded provider columns."""
    cols = table_columns(conn, "settings")
    if not any(c in cols for c in LEGACY_PROVIDER_COLUMNS):
        return
    conn.execute(
        """
        CREATE TABLE settings_v3 (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            api_base TEXT,
            selected_provider_name TEXT NOT NULL DEFAULT '',
            streaming_enabled INTEGER NOT NULL DEFAULT 1,
            auto_save_enabled INTEGER NOT NULL DEFAULT 1,
            word_limit INTEGER NOT NULL DEFAULT 500,
            temperature REAL NOT NULL DEFAULT 0.7,
            max_tokens INTEGER NOT NULL DEFAULT 1024,
            timeout_seconds INTEGER NOT NULL DEFAULT 120,
            use_streaming INTEGER NOT NULL DEFAULT 1
        );
        """
    )
    shared = ", ".join(c for c in SETTINGS_COLUMNS_V3 if c in cols)
    conn.execute(f"INSERT INTO settings_v3({shared}) SELECT {shared} FROM settings")
    conn.execute("DROP TABLE settings")
    conn.execute("ALTER TABLE settings_v3 RENAME TO settings")


MIGRATIONS: List[Migration] = [
    Migration(1, "legacy single-provider settings", create_legacy_settings),
    Migration(2, "providers table and selection", add_providers_table),
    Migration(3, "drop legacy provider columns", drop_legacy_columns),
]

SCHEMA_VERSION = MIGRATIONS[-1].version


def get_schema_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def migrate(conn: sqlite3.Connection, target: int = SCHEMA_VERSION) -> int:
    """Apply every pending migration up to ``target``.

    Each step runs in its own transaction; a failing step is rolled back and
    the error propagates, leaving the database at the previous version.

    Returns
    -------
    int
        The schema version after migrating.
    """
    current = get_schema_version(conn)
    for step in MIGRATIONS:
        if step.version <= current or step.version > target:
            continue
        conn.execute("BEGIN IMMEDIATE")
        try:
            # Another connection may have applied this step while we waited.
            if get_schema_version(conn) < step.version:
                step.apply(conn)
                conn.execute(f"PRAGMA user_version = {int(step.version)}")
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
        current = step.version
    return current


__all__ = [
    "LEGACY_PROVIDER_COLUMNS",
    "MIGRATIONS",
    "Migration",
    "SCHEMA_VERSION",
    "add_providers_table",
    "create_legacy_settings",
    "drop_legacy_columns",
    "get_schema_version",
    "migrate",
]
