from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ..base.errors import ConfigurationError
from ..base.models import AppSettings, ProviderConfig
from ..config.defaults import LEGACY_PROVIDER_NAME

# Top-level keys of the oldest single-provider settings file.
_LEGACY_PROVIDER_KEYS = {
    "Vendor": "vendor",
    "ApiKey": "api_key",
    "BaseUrl": "base_url",
    "DefaultModel": "default_model",
}


def _lookup(data: Mapping[str, Any], pascal: str, snake: str) -> Any:
    if pascal in data:
        return data[pascal]
    return data.get(snake)


def _has_legacy_provider(data: Mapping[str, Any]) -> bool:
    return any(_lookup(data, p, s) for p, s in _LEGACY_PROVIDER_KEYS.items())


def settings_from_mapping(data: Mapping[str, Any]) -> AppSettings:
    """Build ``AppSettings`` from a flat settings document.

    Accepts the multi-provider shape (``Providers`` list, PascalCase or
    snake_case keys) and the oldest single-provider shape where ``Vendor``,
    ``ApiKey``, ``BaseUrl`` and ``DefaultModel`` sit at the top level. The
    latter becomes one provider named ``Default`` which is also selected.

    Raises
    ------
    pydantic.ValidationError
        Field values out of range (e.g. negative ``MaxTokens``).
    """
    doc: Dict[str, Any] = dict(data)
    providers = _lookup(doc, "Providers", "providers")
    if not providers and _has_legacy_provider(doc):
        fields = {
            snake: _lookup(doc, pascal, snake)
            for pascal, snake in _LEGACY_PROVIDER_KEYS.items()
            if _lookup(doc, pascal, snake) is not None
        }
        for pascal, snake in _LEGACY_PROVIDER_KEYS.items():
            doc.pop(pascal, None)
            doc.pop(snake, None)
        doc["Providers"] = [ProviderConfig(name=LEGACY_PROVIDER_NAME, **fields)]
        doc.pop("providers", None)
        if not _lookup(doc, "SelectedProviderName", "selected_provider_name"):
            doc["SelectedProviderName"] = LEGACY_PROVIDER_NAME
            doc.pop("selected_provider_name", None)
    return AppSettings.model_validate(doc)


def import_legacy_json(source: Union[str, Path]) -> AppSettings:
    """Read a flat JSON settings file (backup or original application file).

    Parameters
    ----------
    source:
        Path to the JSON file.

    Returns
    -------
    AppSettings
        The parsed settings. Invariants (non-empty providers, resolvable
        selection) are enforced later by the store.

    Failure Modes
    -------------
    - ``OSError`` when the file cannot be read.
    - ``ConfigurationError`` when the content is not a JSON object.
    - ``pydantic.ValidationError`` for out-of-range values.
    """
    path = Path(source).expanduser()
    text = path.read_text(encoding="utf-8-sig")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file is not valid JSON: {path} ({e.msg})") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file does not contain a JSON object: {path}")
    return settings_from_mapping(data)


__all__ = ["import_legacy_json", "settings_from_mapping"]
