"""Unified provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``textgen_providers.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.configuration_error import ConfigurationError
from .errors_parts.upstream_error import UpstreamError
from .errors_parts.decode_error import DecodeError
from .errors_parts.classification import classify_exception, code_for_status

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigurationError",
    "UpstreamError",
    "DecodeError",
    "classify_exception",
    "code_for_status",
]
