"""Configuration data model (provider profiles and application settings).

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation, ``model_copy`` and JSON
  serialization.

Serialization
-------------
Field aliases are PascalCase (``ApiKey``, ``SelectedProviderName``) so the
flat JSON backup has the same shape as the settings file written by the
desktop client; snake_case names are accepted on input too.

Ownership
---------
``AppSettings.providers`` exclusively owns its entries. ``ProviderConfig`` is
frozen: an in-flight completion call holds a snapshot that edits cannot
change. Edits replace entries through the ``AppSettings`` methods below.
"""
from __future__ import annotations

import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal

from ..config.defaults import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_PROVIDER_NAME,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USE_STREAMING,
    DEFAULT_WORD_LIMIT,
    NEW_PROVIDER_NAME_TEMPLATE,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
)
from .errors import ConfigurationError
from .vendor import Vendor, VendorClass, classify_vendor


_MODEL_CONFIG = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


def _new_id() -> str:
    return str(uuid.uuid4())


class ProviderConfig(BaseModel):
    """One named provider profile (immutable snapshot).

    Attributes
    ----------
    id:
        Opaque identifier (uuid4 string by default).
    name:
        Unique display name within the settings aggregate.
    vendor:
        Vendor determining the wire-format quirks.
    api_key:
        Secret credential; may be empty, but only ``custom`` providers can
        complete a call without one.
    base_url:
        Absolute base URL or full endpoint.
    default_model:
        Model used when the call does not name one.
    """

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str = ""
    vendor: Vendor = Vendor.OPENAI
    api_key: str = ""
    base_url: str = OPENAI_DEFAULT_BASE_URL
    default_model: str = OPENAI_DEFAULT_MODEL

    @field_validator("vendor", mode="before")
    @classmethod
    def _parse_vendor(cls, value):
        return Vendor.parse(value)

    @field_validator("name", "api_key", "base_url", "default_model", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return "" if value is None else value

    def classify(self) -> VendorClass:
        """Classify this profile's wire protocol (see ``classify_vendor``)."""
        return classify_vendor(self.vendor, self.base_url, self.default_model)

    @classmethod
    def default(cls, name: str = DEFAULT_PROVIDER_NAME) -> "ProviderConfig":
        return cls(name=name)


class FeatureFlags(BaseModel):
    model_config = _MODEL_CONFIG

    streaming_enabled: bool = True
    auto_save_enabled: bool = True


class GenerationDefaults(BaseModel):
    """Global generation parameters (``max_tokens=0`` means provider default)."""

    model_config = _MODEL_CONFIG

    word_limit: int = Field(default=DEFAULT_WORD_LIMIT, gt=0)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=0)
    timeout_seconds: int = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    use_streaming: bool = DEFAULT_USE_STREAMING


class AppSettings(BaseModel):
    """Aggregate root persisted by the configuration store."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, validate_assignment=True)

    api_base_override: Optional[str] = Field(default=None, alias="ApiBase")
    selected_provider_name: str = ""
    feature_flags: FeatureFlags = Field(default_factory=FeatureFlags)
    generation_defaults: GenerationDefaults = Field(default_factory=GenerationDefaults)
    providers: List[ProviderConfig] = Field(default_factory=list)

    @field_validator("api_base_override", mode="before")
    @classmethod
    def _blank_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def default(cls) -> "AppSettings":
        """Return settings holding only the synthesized default provider."""
        provider = ProviderConfig.default()
        return cls(selected_provider_name=provider.name, providers=[provider])

    # ---- queries ----
    def provider_names(self) -> List[str]:
        return [p.name for p in self.providers]

    def find_provider(self, name: str) -> Optional[ProviderConfig]:
        for p in self.providers:
            if p.name == name:
                return p
        return None

    def selected_provider(self) -> Optional[ProviderConfig]:
        """Return the selected provider, or ``None`` when it does not resolve."""
        if not self.selected_provider_name:
            return None
        return self.find_provider(self.selected_provider_name)

    def duplicate_names(self) -> List[str]:
        seen: set[str] = set()
        dupes: List[str] = []
        for name in self.provider_names():
            if name in seen and name not in dupes:
                dupes.append(name)
            seen.add(name)
        return dupes

    # ---- edits ----
    def _index_of(self, name: str) -> int:
        for i, p in enumerate(self.providers):
            if p.name == name:
                return i
        raise ConfigurationError(f"Unknown provider: {name!r}", provider=name)

    def _next_provider_name(self) -> str:
        index = len(self.providers) + 1
        names = set(self.provider_names())
        while NEW_PROVIDER_NAME_TEMPLATE.format(index=index) in names:
            index += 1
        return NEW_PROVIDER_NAME_TEMPLATE.format(index=index)

    def add_provider(self, name: Optional[str] = None, *, select: bool = True, **fields) -> ProviderConfig:
        """Append a new provider profile and (by default) select it.

        Raises:
            ConfigurationError: ``name`` is already used.
        """
        name = name or self._next_provider_name()
        if self.find_provider(name) is not None:
            raise ConfigurationError(f"Provider name already exists: {name!r}", provider=name)
        provider = ProviderConfig(name=name, **fields)
        self.providers = [*self.providers, provider]
        if select:
            self.selected_provider_name = provider.name
        return provider

    def update_provider(self, name: str, /, **changes) -> ProviderConfig:
        """Replace provider ``name`` with an edited copy.

        Renaming keeps the selection bound to the renamed entry.

        Raises:
            ConfigurationError: unknown provider, or the new name collides.
        """
        index = self._index_of(name)
        new_name = changes.get("name", name)
        if new_name != name and self.find_provider(new_name) is not None:
            raise ConfigurationError(f"Provider name already exists: {new_name!r}", provider=new_name)
        current = self.providers[index]
        updated = ProviderConfig.model_validate({**current.model_dump(), **changes})
        providers = list(self.providers)
        providers[index] = updated
        self.providers = providers
        if self.selected_provider_name == name:
            self.selected_provider_name = updated.name
        return updated

    def remove_provider(self, name: str) -> None:
        """Remove provider ``name``; the last remaining provider cannot go.

        When the selected provider is removed, its predecessor (or the new
        first entry) becomes selected.
        """
        index = self._index_of(name)
        if len(self.providers) <= 1:
            raise ConfigurationError("Cannot remove the last provider.", provider=name)
        providers = list(self.providers)
        providers.pop(index)
        self.providers = providers
        if self.selected_provider_name == name:
            self.selected_provider_name = providers[max(0, index - 1)].name

    def select_provider(self, name: str) -> ProviderConfig:
        provider = self.find_provider(name)
        if provider is None:
            raise ConfigurationError(f"Unknown provider: {name!r}", provider=name)
        self.selected_provider_name = name
        return provider


__all__ = ["ProviderConfig", "FeatureFlags", "GenerationDefaults", "AppSettings"]
