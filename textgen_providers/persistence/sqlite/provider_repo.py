"""SQLite-backed implementation of ``IProviderRepo``.

Providers are keyed by name; ``position`` preserves the user's ordering.
``replace_all`` rewrites the whole list so removals and renames need no
diffing. Writes defer commit to the Unit of Work.
"""

from __future__ import annotations

import sqlite3
from typing import List, Sequence

from ...base.models import ProviderConfig
from ..interfaces import IProviderRepo


class ProviderRepoSqlite(IProviderRepo):
    """Repository for provider profiles. No implicit commits."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def list_all(self) -> List[ProviderConfig]:
        rows = self.conn.execute(
            "SELECT name, id, vendor, api_key, base_url, default_model FROM providers ORDER BY position, rowid"
        ).fetchall()
        return [
            ProviderConfig(
                id=row["id"],
                name=row["name"],
                vendor=row["vendor"],
                api_key=row["api_key"],
                base_url=row["base_url"],
                default_model=row["default_model"],
            )
            for row in rows
        ]

    def replace_all(self, providers: Sequence[ProviderConfig]) -> None:
        self.conn.execute("DELETE FROM providers")
        self.conn.executemany(
            "INSERT INTO providers(name, id, vendor, api_key, base_url, default_model, position) VALUES(?, ?, ?, ?, ?, ?, ?)",
            [
                (p.name, p.id, p.vendor.value, p.api_key, p.base_url, p.default_model, position)
                for position, p in enumerate(providers)
            ],
        )

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM providers").fetchone()[0])
