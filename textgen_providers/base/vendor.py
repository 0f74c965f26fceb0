"""Vendor identifiers and wire-protocol classification.

A provider profile names one of five vendors. What matters on the wire is
narrower: the *kind* of protocol the endpoint speaks. ``classify_vendor``
computes that once per call as a :class:`VendorClass` which the endpoint
resolver, the payload builder, the header builder and the decoders consume,
so no later layer repeats the string matching.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .constants import OPENAI_HOST_MARKERS, ZHIPU_HOST_MARKER, ZHIPU_MODEL_PREFIX


class Vendor(str, Enum):
    """Vendor named by a provider profile."""

    OPENAI = "openai"
    AZURE = "azure"
    OPENROUTER = "openrouter"
    ZHIPU = "zhipu"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Union[str, "Vendor", None]) -> "Vendor":
        """Normalize a vendor string.

        Empty values mean ``openai``; unknown values are treated as
        ``custom``.
        """
        if isinstance(value, Vendor):
            return value
        text = (value or "").strip().lower()
        if not text:
            return cls.OPENAI
        try:
            return cls(text)
        except ValueError:
            return cls.CUSTOM


class VendorKind(str, Enum):
    """Closed set of wire protocols the client knows how to speak."""

    OPENAI_COMPATIBLE = "openai_compatible"
    AZURE = "azure"
    ZHIPU = "zhipu"
    CUSTOM_OPAQUE = "custom_opaque"


@dataclass(frozen=True)
class VendorClass:
    """Classification result threaded through one completion call.

    Attributes:
        vendor: The vendor named by the profile.
        kind: Wire protocol of the request body and response.
        opaque_endpoint: ``True`` when the base URL must be used literally
            (Azure, unrecognized custom hosts, and custom zhipu-family models
            served from a host that is not the zhipu cloud).
        endpoint_kind: Protocol whose URL rules apply when it differs from
            ``kind`` (a zhipu-family model behind an OpenAI-compatible host).
    """

    vendor: Vendor
    kind: VendorKind
    opaque_endpoint: bool = False
    endpoint_kind: Optional[VendorKind] = None

    @property
    def route_kind(self) -> VendorKind:
        """Protocol that decides the request URL."""
        return self.endpoint_kind or self.kind

    @property
    def is_zhipu_family(self) -> bool:
        return self.kind is VendorKind.ZHIPU

    @property
    def uses_bearer_auth(self) -> bool:
        return self.kind is not VendorKind.AZURE

    @property
    def requires_api_key(self) -> bool:
        return self.vendor is not Vendor.CUSTOM


def _contains_any(haystack: str, needles) -> bool:
    return any(n in haystack for n in needles)


def classify_vendor(
    vendor: Union[str, Vendor, VendorClass, None],
    base_url: Optional[str] = "",
    model: Optional[str] = "",
) -> VendorClass:
    """Classify a profile's vendor, URL and model into a :class:`VendorClass`.

    Parameters:
        vendor: Vendor string or enum (an existing ``VendorClass`` is returned
            unchanged).
        base_url: Configured base URL; only host markers are inspected.
        model: Model name; the zhipu family prefix marks custom zhipu models.

    Returns:
        The classification. Never raises.
    """
    if isinstance(vendor, VendorClass):
        return vendor
    v = Vendor.parse(vendor)
    url = (base_url or "").strip().lower()
    model_name = (model or "").strip().lower()

    if v is Vendor.ZHIPU:
        return VendorClass(v, VendorKind.ZHIPU)
    if v is Vendor.AZURE:
        return VendorClass(v, VendorKind.AZURE, opaque_endpoint=True)
    if v in (Vendor.OPENAI, Vendor.OPENROUTER):
        return VendorClass(v, VendorKind.OPENAI_COMPATIBLE)

    if ZHIPU_HOST_MARKER in url:
        return VendorClass(v, VendorKind.ZHIPU)
    zhipu_model = model_name.startswith(ZHIPU_MODEL_PREFIX)
    if _contains_any(url, OPENAI_HOST_MARKERS):
        if zhipu_model:
            return VendorClass(v, VendorKind.ZHIPU, endpoint_kind=VendorKind.OPENAI_COMPATIBLE)
        return VendorClass(v, VendorKind.OPENAI_COMPATIBLE)
    if zhipu_model:
        return VendorClass(v, VendorKind.ZHIPU, opaque_endpoint=True)
    return VendorClass(v, VendorKind.CUSTOM_OPAQUE, opaque_endpoint=True)


__all__ = ["Vendor", "VendorKind", "VendorClass", "classify_vendor"]
