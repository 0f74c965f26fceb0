"""Configuration persistence: SQLite store, schema migrations, JSON backup."""

from .backup import read_backup, write_backup
from .migrator import import_legacy_json, settings_from_mapping
from .store import ConfigStore

__all__ = ["ConfigStore", "import_legacy_json", "read_backup", "settings_from_mapping", "write_backup"]
