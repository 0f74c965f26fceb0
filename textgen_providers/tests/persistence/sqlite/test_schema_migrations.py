"""Schema migration tests: fresh databases, legacy upgrades and rollback."""

from __future__ import annotations

import pytest

from textgen_providers.persistence.sqlite import schema
from textgen_providers.persistence.sqlite.engine import table_columns
from textgen_providers.persistence.sqlite.schema import (
    SCHEMA_VERSION,
    SETTINGS_COLUMNS_V3,
    add_providers_table,
    drop_legacy_columns,
    get_schema_version,
    migrate,
)


def _tables(conn):
    return {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}


def _seed_legacy(conn, **values):
    migrate(conn, target=1)
    row = {"id": 1, "vendor": "OpenAI", "api_key": "legacy-key", "base_url": "https://api.openai.com/v1", "default_model": "gpt-4o"}
    row.update(values)
    cols = ", ".join(row)
    marks = ", ".join("?" for _ in row)
    conn.execute(f"INSERT INTO settings({cols}) VALUES({marks})", tuple(row.values()))


def test_fresh_database_reaches_current_version(raw_conn):
    assert migrate(raw_conn) == SCHEMA_VERSION == 3  # nosec B101
    assert get_schema_version(raw_conn) == SCHEMA_VERSION  # nosec B101
    assert {"settings", "providers"} <= _tables(raw_conn)  # nosec B101
    assert set(table_columns(raw_conn, "settings")) == set(SETTINGS_COLUMNS_V3)  # nosec B101
    assert raw_conn.execute("SELECT COUNT(*) FROM providers").fetchone()[0] == 0  # nosec B101


def test_migrate_is_a_no_op_when_current(raw_conn):
    migrate(raw_conn)
    assert migrate(raw_conn) == SCHEMA_VERSION  # nosec B101


def test_legacy_provider_becomes_default(raw_conn):
    _seed_legacy(raw_conn, word_limit=700, api_base="https://proxy.local")
    migrate(raw_conn)

    rows = raw_conn.execute("SELECT name, vendor, api_key, base_url, default_model FROM providers").fetchall()
    assert [tuple(r) for r in rows] == [  # nosec B101
        ("Default", "openai", "legacy-key", "https://api.openai.com/v1", "gpt-4o")
    ]
    settings = raw_conn.execute("SELECT * FROM settings WHERE id = 1").fetchone()
    assert settings["selected_provider_name"] == "Default"  # nosec B101
    assert settings["word_limit"] == 700 and settings["api_base"] == "https://proxy.local"  # nosec B101
    assert not set(table_columns(raw_conn, "settings")) & {"vendor", "api_key", "base_url", "default_model"}  # nosec B101


def test_legacy_row_without_provider_data_creates_no_provider(raw_conn):
    _seed_legacy(raw_conn, vendor=None, api_key=None, base_url=None, default_model=None)
    migrate(raw_conn)
    assert raw_conn.execute("SELECT COUNT(*) FROM providers").fetchone()[0] == 0  # nosec B101


def test_steps_are_idempotent(raw_conn):
    _seed_legacy(raw_conn)
    migrate(raw_conn, target=2)
    raw_conn.execute("UPDATE providers SET api_key = 'edited'")

    add_providers_table(raw_conn)
    rows = raw_conn.execute("SELECT name, api_key FROM providers").fetchall()
    assert [tuple(r) for r in rows] == [("Default", "edited")]  # nosec B101

    migrate(raw_conn)
    drop_legacy_columns(raw_conn)
    add_providers_table(raw_conn)
    assert raw_conn.execute("SELECT COUNT(*) FROM providers").fetchone()[0] == 1  # nosec B101


def test_failed_step_rolls_back(raw_conn, monkeypatch):
    def broken(conn):
        conn.execute("CREATE TABLE half_done(x INTEGER)")
        raise RuntimeError("step failed")

    monkeypatch.setattr(schema, "MIGRATIONS", [*schema.MIGRATIONS, schema.Migration(4, "broken", broken)])
    with pytest.raises(RuntimeError, match="step failed"):
        migrate(raw_conn, target=4)
    assert get_schema_version(raw_conn) == 3  # nosec B101
    assert "half_done" not in _tables(raw_conn)  # nosec B101
    assert not raw_conn.in_transaction  # nosec B101
