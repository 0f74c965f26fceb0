"""Configuration store: SQLite primary storage with a flat JSON backup.

Purpose
-------
Load and save the ``AppSettings`` aggregate. SQLite is the source of truth;
after every successful save a JSON backup is written next to it so the
configuration survives a corrupted or deleted database.

Load algorithm
--------------
1. Open the database and apply pending schema migrations.
2. Read the settings row and the provider list.
3. When the structured store is empty and a readable backup exists, the
   backup becomes the source of truth and is written into SQLite at once.
4. Enforce the aggregate invariants (unique names, at least one provider,
   resolvable selection) and persist any correction.

Out-of-range generation values in the settings row are repaired (temperature
clamped, anything else reset to its default) and the repair is persisted.
A ``sqlite3.Error`` or an unreadable row during load is logged and the store
degrades to the backup, then to built-in defaults. ``load`` itself never
raises for storage failures.

Save semantics
--------------
The settings row and the full provider list are replaced in one transaction;
SQLite errors roll back and propagate. The backup write happens afterwards
and its failures are logged and swallowed.

Concurrency
-----------
``load`` and ``save`` are serialized by a store-level re-entrant lock. Every
operation opens (and closes) its own connection. Across stores sharing one
database, ``load`` reads the settings row and the provider list in one read
transaction and ``save`` writes under ``BEGIN IMMEDIATE``, so a reader never
sees half of another writer's aggregate.
"""

from __future__ import annotations

import math
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import ValidationError

from ..base.errors import ConfigurationError, ProviderError
from ..base.logging import LogLevel, ProviderLogger, StdlibProviderLogger, get_logger, log_event
from ..base.models import AppSettings, FeatureFlags, GenerationDefaults, ProviderConfig
from ..base.payload import clamp_temperature
from ..config import get_store_config
from .backup import read_backup, write_backup
from .interfaces import SettingsRecord
from .migrator import import_legacy_json
from .sqlite.engine import open_connection
from .sqlite.schema import migrate
from .sqlite.unit_of_work import UnitOfWorkSqlite

_SOURCE = "ConfigStore"
_GENERATION_FIELDS = ("word_limit", "temperature", "max_tokens", "timeout_seconds", "use_streaming")

PathLike = Union[str, Path]


def _record_from_settings(settings: AppSettings) -> SettingsRecord:
    flags = settings.feature_flags
    gen = settings.generation_defaults
    return SettingsRecord(
        api_base=settings.api_base_override,
        selected_provider_name=settings.selected_provider_name,
        streaming_enabled=flags.streaming_enabled,
        auto_save_enabled=flags.auto_save_enabled,
        word_limit=gen.word_limit,
        temperature=gen.temperature,
        max_tokens=gen.max_tokens,
        timeout_seconds=gen.timeout_seconds,
        use_streaming=gen.use_streaming,
    )


def _generation_defaults(record: SettingsRecord) -> Tuple[GenerationDefaults, bool]:
    """Build generation defaults from a stored row, repairing out-of-range values.

    Temperature is clamped into range; any other invalid value falls back to
    its default. The flag reports whether a repair happened.
    """
    fallback = GenerationDefaults()
    values = {}
    repaired = False
    for name in _GENERATION_FIELDS:
        value = getattr(record, name)
        try:
            GenerationDefaults(**{name: value})
        except ValidationError:
            repaired = True
            if name == "temperature" and math.isfinite(value):
                value = clamp_temperature(value)
            else:
                value = getattr(fallback, name)
        values[name] = value
    return GenerationDefaults(**values), repaired


def _settings_from_rows(
    record: Optional[SettingsRecord], providers: List[ProviderConfig]
) -> Tuple[AppSettings, bool]:
    if record is None:
        return AppSettings(providers=providers), False
    defaults, repaired = _generation_defaults(record)
    return AppSettings(
        api_base_override=record.api_base,
        selected_provider_name=record.selected_provider_name,
        feature_flags=FeatureFlags(
            streaming_enabled=record.streaming_enabled,
            auto_save_enabled=record.auto_save_enabled,
        ),
        generation_defaults=defaults,
        providers=providers,
    ), repaired


class ConfigStore:
    """Persist provider configuration in SQLite with a JSON backup.

    Parameters
    ----------
    db_path:
        SQLite database file; defaults to the configured location.
    backup_path:
        JSON backup file; defaults to the configured location.
    logger:
        Logging collaborator; defaults to a stdlib-backed logger on
        ``textgen.store``.
    busy_timeout_ms:
        SQLite lock wait; defaults to the configured value.
    """

    def __init__(
        self,
        db_path: Optional[PathLike] = None,
        backup_path: Optional[PathLike] = None,
        *,
        logger: Optional[ProviderLogger] = None,
        busy_timeout_ms: Optional[int] = None,
    ) -> None:
        cfg = get_store_config(
            {"db_path": db_path, "backup_path": backup_path, "busy_timeout_ms": busy_timeout_ms}
        )
        self.db_path: Path = cfg.db_path
        self.backup_path: Path = cfg.backup_path
        self._busy_timeout_ms = cfg.busy_timeout_ms
        self._logger: ProviderLogger = logger or StdlibProviderLogger(get_logger("store"))
        self._lock = threading.RLock()

    # ---- public API ----
    def load(self) -> AppSettings:
        """Return the current settings; never raises for storage failures."""
        with self._lock:
            try:
                return self._load_structured()
            except (sqlite3.Error, ValueError, TypeError) as e:
                # ValueError covers pydantic validation of unrepairable rows.
                self._logger.log_exception(e, f"Failed to load settings from {self.db_path}", _SOURCE)
            return self._load_fallback()

    def save(self, settings: AppSettings) -> None:
        """Persist ``settings`` atomically, then refresh the JSON backup.

        Raises
        ------
        ConfigurationError
            No providers, or duplicate provider names.
        sqlite3.Error
            The structured write failed (nothing was changed).
        """
        self._validate(settings)
        with self._lock:
            with open_connection(self.db_path, self._busy_timeout_ms) as conn:
                migrate(conn)
                with UnitOfWorkSqlite(conn) as uow:
                    self._write(uow, settings)
            log_event(self._logger, "store.saved", source=_SOURCE, providers=len(settings.providers))
            self._write_backup_quietly(settings)

    def export_backup(self, path: PathLike) -> Path:
        """Write the current settings as a flat JSON file at ``path``."""
        with self._lock:
            settings = self.load()
            write_backup(path, settings)
        return Path(path).expanduser()

    def import_backup(self, path: PathLike) -> AppSettings:
        """Replace the stored settings with a flat JSON file's content.

        Accepts this store's backups and the original application's
        ``appsettings.client.json`` (including its single-provider shape).
        Returns the settings as loaded after the import.
        """
        imported = import_legacy_json(path)
        settings, _ = self._enforce_invariants(imported)
        with self._lock:
            self.save(settings)
            return self.load()

    # ---- load helpers ----
    def _load_structured(self) -> AppSettings:
        with open_connection(self.db_path, self._busy_timeout_ms) as conn:
            migrate(conn)
            uow = UnitOfWorkSqlite(conn)
            with uow.read_snapshot():
                record = uow.settings.get()
                providers = uow.providers.list_all()

            if record is None and not providers:
                promoted = self._read_backup_quietly()
                if promoted is not None:
                    settings, _ = self._enforce_invariants(promoted)
                    with uow:
                        self._write(uow, settings)
                    log_event(
                        self._logger,
                        "store.backup_promoted",
                        source=_SOURCE,
                        backup=str(self.backup_path),
                        providers=len(settings.providers),
                    )
                    return settings

            settings, repaired = _settings_from_rows(record, providers)
            if repaired:
                log_event(self._logger, "store.settings_repaired", level=LogLevel.WARN, source=_SOURCE)
            settings, changed = self._enforce_invariants(settings)
            if changed or repaired or record is None:
                with uow:
                    self._write(uow, settings)
            return settings

    def _load_fallback(self) -> AppSettings:
        backup = self._read_backup_quietly()
        if backup is not None:
            settings, _ = self._enforce_invariants(backup)
            log_event(self._logger, "store.fallback", level=LogLevel.WARN, source=_SOURCE, origin="backup")
            return settings
        log_event(self._logger, "store.fallback", level=LogLevel.WARN, source=_SOURCE, origin="defaults")
        return AppSettings.default()

    def _read_backup_quietly(self) -> Optional[AppSettings]:
        try:
            return read_backup(self.backup_path)
        except (OSError, ValueError, ProviderError) as e:
            self._logger.log_exception(e, f"Ignoring unreadable backup {self.backup_path}", _SOURCE, LogLevel.WARN)
            return None

    def _enforce_invariants(self, settings: AppSettings) -> Tuple[AppSettings, bool]:
        """Return ``settings`` corrected to satisfy the aggregate invariants.

        Later duplicates of a provider name are dropped, a default provider is
        synthesized when none exists, and an unresolvable selection is rebound
        to the first provider. The flag reports whether anything changed.
        """
        changed = False
        providers: List[ProviderConfig] = []
        seen = set()
        for p in settings.providers:
            if p.name in seen:
                changed = True
                continue
            seen.add(p.name)
            providers.append(p)
        if not providers:
            providers.append(ProviderConfig.default())
            changed = True
            log_event(self._logger, "store.default_provider", level=LogLevel.WARN, source=_SOURCE)

        selected = settings.selected_provider_name
        if selected not in {p.name for p in providers}:
            log_event(
                self._logger,
                "store.selection_rebound",
                level=LogLevel.WARN,
                source=_SOURCE,
                previous=selected,
                selected=providers[0].name,
            )
            selected = providers[0].name
            changed = True
        if not changed:
            return settings, False
        return settings.model_copy(update={"providers": providers, "selected_provider_name": selected}), True

    # ---- save helpers ----
    @staticmethod
    def _validate(settings: AppSettings) -> None:
        if not settings.providers:
            raise ConfigurationError("At least one provider is required.")
        dupes = settings.duplicate_names()
        if dupes:
            raise ConfigurationError(f"Duplicate provider names: {', '.join(dupes)}", provider=dupes[0])

    @staticmethod
    def _write(uow: UnitOfWorkSqlite, settings: AppSettings) -> None:
        uow.settings.put(_record_from_settings(settings))
        uow.providers.replace_all(settings.providers)

    def _write_backup_quietly(self, settings: AppSettings) -> None:
        try:
            write_backup(self.backup_path, settings)
        except (OSError, TypeError, ValueError) as e:
            self._logger.log_exception(e, f"Failed to write settings backup {self.backup_path}", _SOURCE, LogLevel.WARN)


__all__ = ["ConfigStore"]
