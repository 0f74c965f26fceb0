"""Wire-protocol building blocks shared by the client and the store.

Vendor classification, endpoint resolution, request bodies, response and
stream decoding, the data model, errors, cancellation and logging.
"""

from .cancellation import CancellationToken, CancelledError
from .decoding import decode_response_text, extract_response_text
from .endpoints import resolve_endpoint
from .errors import (
    ConfigurationError,
    DecodeError,
    ErrorCode,
    ProviderError,
    UpstreamError,
    classify_exception,
)
from .logging import LogLevel, ProviderLogger, RecordingLogger, StdlibProviderLogger
from .models import AppSettings, FeatureFlags, GenerationDefaults, ProviderConfig
from .payload import build_request_body
from .streaming import StreamDecoder, StreamState, translate_text_from_line
from .vendor import Vendor, VendorClass, VendorKind, classify_vendor

__all__ = [
    "AppSettings",
    "CancellationToken",
    "CancelledError",
    "ConfigurationError",
    "DecodeError",
    "ErrorCode",
    "FeatureFlags",
    "GenerationDefaults",
    "LogLevel",
    "ProviderConfig",
    "ProviderError",
    "ProviderLogger",
    "RecordingLogger",
    "StdlibProviderLogger",
    "StreamDecoder",
    "StreamState",
    "UpstreamError",
    "Vendor",
    "VendorClass",
    "VendorKind",
    "build_request_body",
    "classify_exception",
    "classify_vendor",
    "decode_response_text",
    "extract_response_text",
    "resolve_endpoint",
    "translate_text_from_line",
]
