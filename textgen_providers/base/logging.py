"""Base structured logging utilities and the injected logging collaborator.

Rationale:
- Central place to configure consistent JSON (or plain) logging for the
  ``textgen`` logger tree.
- The completion client and the configuration store never reach for a
  global logger: they receive a :class:`ProviderLogger` in their
  constructors. :class:`StdlibProviderLogger` adapts the stdlib ``logging``
  module to that contract; :class:`RecordingLogger` keeps entries in memory.
- Logging is fire-and-forget. No method of a shipped ``ProviderLogger``
  raises back into the caller.

Environment:
    ``TEXTGEN_LOG_LEVEL`` overrides the base logger level (DEBUG, INFO, ...).
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
import threading
import traceback
from dataclasses import dataclass
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import Any, List, Optional, Protocol, runtime_checkable

from .log_support import JsonFormatter, LogContext


BASE_LOGGER_NAME = "textgen"
_BASE_LOGGER_ATTR = "_textgen_logger_initialized"
_CONSOLE_HANDLER_ATTR = "_textgen_console_handler"
_FILE_HANDLER_ATTR = "_textgen_file_handler"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class LogLevel(str, Enum):
    """Severity levels understood by the logging collaborator."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def stdlib_level(self) -> int:
        return _STDLIB_LEVELS[self]


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.FATAL: logging.CRITICAL,
}


@runtime_checkable
class ProviderLogger(Protocol):
    """Logging collaborator contract injected into the client and the store."""

    def debug(self, message: str, source: str = "") -> None: ...

    def info(self, message: str, source: str = "") -> None: ...

    def warn(self, message: str, source: str = "") -> None: ...

    def error(self, message: str, source: str = "") -> None: ...

    def fatal(self, message: str, source: str = "") -> None: ...

    def log_exception(
        self,
        err: BaseException,
        message: str = "",
        source: str = "",
        level: LogLevel = LogLevel.ERROR,
    ) -> None: ...


def _parse_level(value: str | None, default: int = logging.INFO) -> int:
    """Parse a logging level string into an integer constant.

    Accepts common names (DEBUG, INFO, WARN, WARNING, ERROR, CRITICAL, FATAL)
    case-insensitively. Falls back to ``default`` on unknown values.
    """
    if not value:
        return default
    mapping = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
        "FATAL": logging.CRITICAL,
    }
    return mapping.get(value.strip().upper(), default)


def _make_formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _ensure_base_logger(json_mode: bool, level: int) -> logging.Logger:
    """Initialize and return the shared ``textgen`` logger."""
    logger = logging.getLogger(BASE_LOGGER_NAME)
    desired_level = _parse_level(os.getenv("TEXTGEN_LOG_LEVEL"), default=level)
    if getattr(logger, _BASE_LOGGER_ATTR, False):
        if logger.level != desired_level:
            logger.setLevel(desired_level)
        for existing in logger.handlers:
            if getattr(existing, _CONSOLE_HANDLER_ATTR, False):
                existing.setLevel(desired_level)
                if hasattr(existing, "setStream"):
                    # Re-point at the current stderr (pytest capture swaps it).
                    with contextlib.suppress(Exception):
                        existing.setStream(sys.stderr)
        return logger

    logger.setLevel(desired_level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(desired_level)
    handler.setFormatter(_make_formatter(json_mode))
    setattr(handler, _CONSOLE_HANDLER_ATTR, True)
    logger.handlers[:] = [handler]
    logger.propagate = False
    setattr(logger, _BASE_LOGGER_ATTR, True)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` as a child of the configured ``textgen`` logger.

    Names outside the ``textgen`` tree are prefixed so that every logger
    returned here shares the base handler configuration.
    """
    base_logger = _ensure_base_logger(json_mode=json_mode, level=level)
    if name == BASE_LOGGER_NAME:
        return base_logger
    if not name.startswith(BASE_LOGGER_NAME + "."):
        name = f"{BASE_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Reconfigure the shared ``textgen`` logger at runtime.

    Parameters
    ----------
    level: int | str | None
        Desired logging level (numeric or name). ``None`` keeps the current one.
    file_path: Optional[str]
        When provided, a rotating file handler (10MB x 5) writing to
        ``file_path`` is attached or re-pointed. When ``None``, any file
        handler previously attached by this function is removed.
    json_mode: bool
        JSON formatter (default) or plain text for the file handler.

    Returns
    -------
    logging.Logger
        The configured base logger.
    """
    logger = _ensure_base_logger(json_mode=json_mode, level=logging.INFO)
    if level is not None:
        numeric = _parse_level(level, default=logger.level) if isinstance(level, str) else level
        logger.setLevel(numeric)
        for h in logger.handlers:
            h.setLevel(numeric)

    managed = [h for h in logger.handlers if getattr(h, _FILE_HANDLER_ATTR, False)]
    if file_path is None:
        for h in managed:
            logger.removeHandler(h)
            with contextlib.suppress(Exception):
                h.close()
        return logger

    abs_path = os.path.abspath(os.path.expanduser(file_path))
    os.makedirs(os.path.dirname(abs_path), exist_ok=True)
    existing: Optional[logging.FileHandler] = None
    for h in managed:
        if getattr(h, "baseFilename", None) == abs_path:
            existing = h
        else:
            logger.removeHandler(h)
            with contextlib.suppress(Exception):
                h.close()
    if existing is None:
        existing = RotatingFileHandler(abs_path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        setattr(existing, _FILE_HANDLER_ATTR, True)
        logger.addHandler(existing)
    existing.setFormatter(_make_formatter(json_mode))
    existing.setLevel(logger.level)
    return logger


class StdlibProviderLogger:
    """``ProviderLogger`` backed by a stdlib ``logging.Logger``.

    ``source`` travels as a ``source`` record attribute so the JSON formatter
    emits it as its own key. Every method swallows its own failures.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger(f"{BASE_LOGGER_NAME}.core")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _emit(self, level: LogLevel, message: str, source: str, exc_info: Any = None) -> None:
        with contextlib.suppress(Exception):
            self._logger.log(
                level.stdlib_level,
                message,
                exc_info=exc_info,
                extra={"source": source} if source else None,
            )

    def debug(self, message: str, source: str = "") -> None:
        self._emit(LogLevel.DEBUG, message, source)

    def info(self, message: str, source: str = "") -> None:
        self._emit(LogLevel.INFO, message, source)

    def warn(self, message: str, source: str = "") -> None:
        self._emit(LogLevel.WARN, message, source)

    def error(self, message: str, source: str = "") -> None:
        self._emit(LogLevel.ERROR, message, source)

    def fatal(self, message: str, source: str = "") -> None:
        self._emit(LogLevel.FATAL, message, source)

    def log_exception(
        self,
        err: BaseException,
        message: str = "",
        source: str = "",
        level: LogLevel = LogLevel.ERROR,
    ) -> None:
        text = f"{message}: {err}" if message else str(err)
        self._emit(level, text, source, exc_info=(type(err), err, err.__traceback__))


@dataclass(frozen=True)
class LogEntry:
    """One entry captured by :class:`RecordingLogger`."""

    level: LogLevel
    message: str
    source: str = ""
    error: Optional[BaseException] = None

    def payload(self) -> dict:
        """Return the JSON payload of a ``log_event`` message (``{}`` otherwise)."""
        try:
            data = json.loads(self.message)
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}


class RecordingLogger:
    """In-memory ``ProviderLogger`` for tests and headless embedding."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.entries: List[LogEntry] = []

    def _add(self, entry: LogEntry) -> None:
        with self._lock:
            self.entries.append(entry)

    def debug(self, message: str, source: str = "") -> None:
        self._add(LogEntry(LogLevel.DEBUG, message, source))

    def info(self, message: str, source: str = "") -> None:
        self._add(LogEntry(LogLevel.INFO, message, source))

    def warn(self, message: str, source: str = "") -> None:
        self._add(LogEntry(LogLevel.WARN, message, source))

    def error(self, message: str, source: str = "") -> None:
        self._add(LogEntry(LogLevel.ERROR, message, source))

    def fatal(self, message: str, source: str = "") -> None:
        self._add(LogEntry(LogLevel.FATAL, message, source))

    def log_exception(
        self,
        err: BaseException,
        message: str = "",
        source: str = "",
        level: LogLevel = LogLevel.ERROR,
    ) -> None:
        detail = "".join(traceback.format_exception_only(type(err), err)).strip()
        self._add(LogEntry(level, f"{message}: {detail}" if message else detail, source, err))

    def events(self, name: str | None = None) -> List[dict]:
        """Return ``log_event`` payloads, optionally filtered by event name."""
        with self._lock:
            payloads = [e.payload() for e in self.entries]
        return [p for p in payloads if p and (name is None or p.get("event") == name)]


def log_event(
    logger: ProviderLogger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: LogLevel = LogLevel.INFO,
    source: str = "",
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit a structured log event through a ``ProviderLogger``.

    Parameters
    ----------
    logger: ProviderLogger
        Injected logging collaborator.
    event: str
        Event name (e.g. ``stream.start``).
    ctx: LogContext | None
        Provider/model/endpoint context; merged shallowly.
    level: LogLevel
        Severity used to pick the collaborator method.
    source: str
        Source label handed to the collaborator.
    keep_none: bool
        When ``True``, keys whose values are ``None`` are preserved.
    **fields: Any
        Arbitrary serializable key/value pairs.
    """
    payload: dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    if keep_none:
        payload.update(fields)
    else:
        payload.update({k: v for k, v in fields.items() if v is not None})
    with contextlib.suppress(Exception):
        message = json.dumps(payload, ensure_ascii=False, default=str)
        getattr(logger, level.value)(message, source)


__all__ = [
    "BASE_LOGGER_NAME",
    "LogContext",
    "LogEntry",
    "LogLevel",
    "ProviderLogger",
    "RecordingLogger",
    "StdlibProviderLogger",
    "configure_logger",
    "get_logger",
    "log_event",
]
