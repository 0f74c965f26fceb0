"""Repository & Unit of Work protocol definitions for the configuration store.

The store depends only on these abstractions; concrete implementations live
under ``persistence/sqlite/``.

Design Principles:
- No concrete behavior; pure structural typing via ``Protocol``.
- Dataclasses represent DTOs crossing repository boundaries.
- Transaction control is delegated to the ``IUnitOfWork`` implementation;
  repositories never commit.

Failure Semantics:
- Repository methods raise backend-specific exceptions (``sqlite3.Error``)
  only for I/O or integrity failures. The store decides how to degrade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from ..base.models import ProviderConfig


@dataclass
class SettingsRecord:
    """Scalar part of the settings aggregate (the singleton settings row)."""

    api_base: Optional[str]
    selected_provider_name: str
    streaming_enabled: bool
    auto_save_enabled: bool
    word_limit: int
    temperature: float
    max_tokens: int
    timeout_seconds: int
    use_streaming: bool


class ISettingsRepo(Protocol):
    def get(self) -> Optional[SettingsRecord]: ...

    def put(self, record: SettingsRecord) -> None: ...


class IProviderRepo(Protocol):
    def list_all(self) -> List[ProviderConfig]: ...

    def replace_all(self, providers: Sequence[ProviderConfig]) -> None: ...

    def count(self) -> int: ...


class IUnitOfWork(Protocol):
    settings: ISettingsRepo
    providers: IProviderRepo

    def __enter__(self) -> "IUnitOfWork": ...

    def __exit__(self, exc_type, exc, tb) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


__all__ = ["SettingsRecord", "ISettingsRepo", "IProviderRepo", "IUnitOfWork"]
