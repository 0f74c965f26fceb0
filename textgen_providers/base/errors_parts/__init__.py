"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `textgen_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import ProviderError
from .configuration_error import ConfigurationError
from .upstream_error import UpstreamError
from .decode_error import DecodeError
from .classification import classify_exception, code_for_status

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "UpstreamError",
    "DecodeError",
    "classify_exception",
    "code_for_status",
]
