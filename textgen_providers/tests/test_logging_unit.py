from __future__ import annotations

import json
import logging

from textgen_providers.base.log_support import JsonFormatter, LogContext
from textgen_providers.base.logging import (
    LogLevel,
    RecordingLogger,
    StdlibProviderLogger,
    configure_logger,
    get_logger,
    log_event,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def _detached_logger(name: str):
    logger = logging.getLogger(name)
    logger.handlers[:] = []
    handler = _ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    return logger, handler


def test_stdlib_logger_maps_levels_and_source():
    logger, handler = _detached_logger("tests.textgen.levels")
    adapter = StdlibProviderLogger(logger)
    adapter.debug("d")
    adapter.warn("w", "Src")
    adapter.fatal("f")
    assert [r.levelno for r in handler.records] == [logging.DEBUG, logging.WARNING, logging.CRITICAL]
    assert handler.records[1].source == "Src"


def test_stdlib_log_exception_attaches_exc_info():
    logger, handler = _detached_logger("tests.textgen.exc")
    adapter = StdlibProviderLogger(logger)
    try:
        raise ValueError("bad value")
    except ValueError as e:
        adapter.log_exception(e, "while parsing", "Parser", LogLevel.WARN)
    (record,) = handler.records
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "while parsing: bad value"
    assert record.exc_info is not None


def test_log_event_merges_context_and_drops_none():
    rec = RecordingLogger()
    ctx = LogContext(provider="Default", model="m", extra={"attempt": 1, "skip": None})
    log_event(rec, "chat.start", ctx, level=LogLevel.DEBUG, source="Test", status=None, n=2)
    (entry,) = rec.entries
    assert entry.level is LogLevel.DEBUG and entry.source == "Test"
    assert entry.payload() == {"event": "chat.start", "provider": "Default", "model": "m", "attempt": 1, "n": 2}


def test_log_event_keep_none():
    rec = RecordingLogger()
    log_event(rec, "x", keep_none=True, value=None)
    assert rec.events("x") == [{"event": "x", "value": None}]


def test_json_formatter_hoists_event_payload():
    record = logging.LogRecord("textgen.t", logging.INFO, __file__, 1, json.dumps({"event": "e", "n": 1}), None, None)
    record.source = "Src"
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e" and out["n"] == 1 and out["source"] == "Src"
    assert "msg" not in out and out["level"] == "INFO"


def test_get_logger_prefixes_names_into_base_tree():
    assert get_logger("store").name == "textgen.store"
    assert get_logger("textgen.client").name == "textgen.client"


def test_configure_logger_attaches_and_removes_file_handler(tmp_path):
    path = tmp_path / "logs" / "textgen.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        assert logger.level == logging.DEBUG
        get_logger("unit").info("hello file")
        for h in logger.handlers:
            h.flush()
        assert "hello file" in path.read_text(encoding="utf-8")
    finally:
        configure_logger(level=logging.INFO, file_path=None)
    assert not any(getattr(h, "baseFilename", None) for h in logger.handlers)
