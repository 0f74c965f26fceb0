"""SQLite-backed Unit of Work implementation aggregating repositories.

This adapter composes repository implementations and manages transaction
boundaries. Entering the context begins an immediate transaction; on exit it
commits when no exception occurred and rolls back otherwise. No implicit
commits happen inside repositories.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from ..interfaces import IUnitOfWork
from .provider_repo import ProviderRepoSqlite
from .settings_repo import SettingsRepoSqlite


class UnitOfWorkSqlite(IUnitOfWork):
    """Unit of Work over one autocommit-mode connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.settings = SettingsRepoSqlite(conn)
        self.providers = ProviderRepoSqlite(conn)
        self._active = False

    def __enter__(self) -> "UnitOfWorkSqlite":
        self._conn.execute("BEGIN IMMEDIATE")
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Commit if no exception was raised; otherwise roll back."""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._active = False

    @contextmanager
    def read_snapshot(self) -> Iterator["UnitOfWorkSqlite"]:
        """Run the enclosed reads in one deferred transaction (a single commit's view)."""
        self._conn.execute("BEGIN")
        try:
            yield self
        finally:
            self.rollback()

    def commit(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("COMMIT")

    def rollback(self) -> None:
        """Rollback the current transaction (idempotent)."""
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")
