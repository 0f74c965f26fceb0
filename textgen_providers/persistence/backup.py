"""Flat JSON backup of the settings aggregate.

The backup mirrors ``AppSettings`` with PascalCase keys plus ``SchemaVersion``,
the same shape as the original application's ``appsettings.client.json``.
Writes go to a uniquely named sibling ``.tmp`` file first and are moved into
place with ``os.replace`` so a crash never leaves a half-written backup.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..base.models import AppSettings
from .migrator import import_legacy_json
from .sqlite.schema import SCHEMA_VERSION


def backup_payload(settings: AppSettings) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"SchemaVersion": SCHEMA_VERSION}
    payload.update(settings.model_dump(by_alias=True, mode="json"))
    return payload


def write_backup(path: Union[str, Path], settings: AppSettings) -> None:
    """Atomically write ``settings`` to ``path`` (parent directories created)."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=target.name + ".", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(backup_payload(settings), fh, ensure_ascii=False, indent=2)
        os.replace(tmp_name, target)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


def read_backup(path: Union[str, Path]) -> Optional[AppSettings]:
    """Return the settings stored at ``path``, or ``None`` when it does not exist."""
    target = Path(path).expanduser()
    if not target.is_file():
        return None
    return import_legacy_json(target)


__all__ = ["backup_payload", "write_backup", "read_backup"]
