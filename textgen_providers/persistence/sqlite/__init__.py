from __future__ import annotations

from .engine import create_connection, open_connection
from .schema import MIGRATIONS, SCHEMA_VERSION, get_schema_version, migrate
from .unit_of_work import UnitOfWorkSqlite

__all__ = [
    "create_connection",
    "open_connection",
    "MIGRATIONS",
    "SCHEMA_VERSION",
    "get_schema_version",
    "migrate",
    "UnitOfWorkSqlite",
]
