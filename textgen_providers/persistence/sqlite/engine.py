"""SQLite engine helpers for the configuration store.

Purpose
-------
Provide centralized helpers for opening SQLite connections. Each store
operation opens its own connection and closes it when done.

External dependencies
---------------------
- Standard library only (``sqlite3``). No side effects at import time.

Timeout and reliability strategy
--------------------------------
- Applies a ``busy_timeout`` (milliseconds) to mitigate lock contention.
- Enables WAL journaling and NORMAL synchronous mode for durability with good
  interactive performance.

Transaction semantics
---------------------
Connections are opened in autocommit mode (``isolation_level=None``).
Transactions are explicit: the migration runner and the Unit of Work issue
``BEGIN``/``COMMIT``/``ROLLBACK`` themselves, which keeps DDL inside the
transaction of the migration step that issues it.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from ...config.defaults import (
    SQLITE_BUSY_TIMEOUT_MS,
    SQLITE_JOURNAL_MODE,
    SQLITE_SYNCHRONOUS,
)


def create_connection(db_path: Union[str, Path], busy_timeout_ms: int = SQLITE_BUSY_TIMEOUT_MS) -> sqlite3.Connection:
    """Open a SQLite connection with sane defaults and apply PRAGMA settings.

    Parameters
    ----------
    db_path:
        Path to the database file. The parent directory is created when
        missing; ``":memory:"`` is passed through.
    busy_timeout_ms:
        Lock wait applied through ``PRAGMA busy_timeout``.

    Returns
    -------
    sqlite3.Connection
        An open autocommit connection with ``row_factory`` set to
        ``sqlite3.Row``.
    """
    if str(db_path) != ":memory:":
        path = Path(db_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        db_path = str(path)
    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000.0, isolation_level=None)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute(f"PRAGMA journal_mode={SQLITE_JOURNAL_MODE};")
        conn.execute(f"PRAGMA synchronous={SQLITE_SYNCHRONOUS};")
        conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")  # ms
    except sqlite3.Error:
        # Not a database file (or unreadable); do not leak the handle.
        conn.close()
        raise
    return conn


@contextmanager
def open_connection(db_path: Union[str, Path], busy_timeout_ms: int = SQLITE_BUSY_TIMEOUT_MS) -> Iterator[sqlite3.Connection]:
    """Context manager yielding a connection that is always closed on exit."""
    conn = create_connection(db_path, busy_timeout_ms)
    try:
        yield conn
    finally:
        conn.close()


def table_columns(conn: sqlite3.Connection, table: str) -> list[str]:
    """Return the column names of ``table`` (empty when it does not exist)."""
    return [row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()]


__all__ = ["create_connection", "open_connection", "table_columns"]
