from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Iterator

import pytest

from textgen_providers.persistence.sqlite import create_connection


@pytest.fixture()
def raw_conn(tmp_path: Path) -> Iterator[sqlite3.Connection]:
    """Unmigrated connection on a temp database file."""
    conn = create_connection(tmp_path / "store.db")
    try:
        yield conn
    finally:
        conn.close()
