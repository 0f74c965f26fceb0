"""SQLite-backed implementation of ``ISettingsRepo``.

Stores the scalar part of the settings aggregate in the singleton
``settings`` row (``id = 1``). Writes defer commit to the Unit of Work.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from ..interfaces import ISettingsRepo, SettingsRecord


class SettingsRepoSqlite(ISettingsRepo):
    """Repository for the singleton settings row. No implicit commits."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def get(self) -> Optional[SettingsRecord]:
        """Return the settings row, or ``None`` when it was never written."""
        row = self.conn.execute(
            """
            SELECT api_base, selected_provider_name, streaming_enabled, auto_save_enabled,
                   word_limit, temperature, max_tokens, timeout_seconds, use_streaming
            FROM settings WHERE id = 1
            """
        ).fetchone()
        if row is None:
            return None
        return SettingsRecord(
            api_base=row["api_base"] or None,
            selected_provider_name=row["selected_provider_name"] or "",
            streaming_enabled=bool(row["streaming_enabled"]),
            auto_save_enabled=bool(row["auto_save_enabled"]),
            word_limit=int(row["word_limit"]),
            temperature=float(row["temperature"]),
            max_tokens=int(row["max_tokens"]),
            timeout_seconds=int(row["timeout_seconds"]),
            use_streaming=bool(row["use_streaming"]),
        )

    def put(self, record: SettingsRecord) -> None:
        """Insert or replace the settings row."""
        self.conn.execute(
            """
            INSERT INTO settings(id, api_base, selected_provider_name, streaming_enabled, auto_save_enabled,
                                 word_limit, temperature, max_tokens, timeout_seconds, use_streaming)
            VALUES(1, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                api_base=excluded.api_base,
                selected_provider_name=excluded.selected_provider_name,
                streaming_enabled=excluded.streaming_enabled,
                auto_save_enabled=excluded.auto_save_enabled,
                word_limit=excluded.word_limit,
                temperature=excluded.temperature,
                max_tokens=excluded.max_tokens,
                timeout_seconds=excluded.timeout_seconds,
                use_streaming=excluded.use_streaming
            """,
            (
                record.api_base,
                record.selected_provider_name,
                int(record.streaming_enabled),
                int(record.auto_save_enabled),
                record.word_limit,
                record.temperature,
                record.max_tokens,
                record.timeout_seconds,
                int(record.use_streaming),
            ),
        )
