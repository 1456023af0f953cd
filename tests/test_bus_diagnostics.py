from __future__ import annotations

import logging
from pathlib import Path

import pytest

from busbind import debug, logging_setup, tracing


@pytest.fixture()
def restore_package_logger():
    logger = logging.getLogger(logging_setup.LOGGER_NAME)
    level, propagate, handlers = logger.level, logger.propagate, list(logger.handlers)
    yield logger
    if logging_setup._HANDLER is not None:
        logger.removeHandler(logging_setup._HANDLER)
        logging_setup._HANDLER.close()
        logging_setup._HANDLER = None
    logger.setLevel(level)
    logger.propagate = propagate
    logger.handlers[:] = handlers


def test_debug_toggle_defaults_off_and_reads_environment(monkeypatch) -> None:
    monkeypatch.delenv(debug.DEBUG_ENV, raising=False)
    assert debug.debug_enabled() is False
    monkeypatch.setenv(debug.DEBUG_ENV, "yes")
    assert debug.debug_enabled() is True
    debug.set_debug(False)
    assert debug.debug_enabled() is False
    debug.set_debug(None)
    assert debug.debug_enabled() is True


def test_trace_is_silent_unless_enabled(monkeypatch, caplog) -> None:
    monkeypatch.delenv(debug.DEBUG_ENV, raising=False)
    logger = logging.getLogger("busbind.test_trace")
    caplog.set_level(logging.DEBUG, logger="busbind.test_trace")
    debug.trace(logger, "hidden %s", 1)
    debug.set_debug(True)
    debug.trace(logger, "shown %s", 2)
    assert "hidden" not in caplog.text
    assert "shown 2" in caplog.text


def test_configure_logging_writes_kv_lines(tmp_path: Path, restore_package_logger) -> None:
    info = logging_setup.configure_logging(tmp_path, debug=True)
    assert info["format"] == "kv"
    assert info["level"] == "DEBUG"
    logging_setup.get_logger().getChild("pump").debug("drained %s", "event")
    logging_setup._HANDLER.flush()
    text = Path(info["log_path"]).read_text(encoding="utf-8")
    assert "level=DEBUG logger=busbind.pump msg=drained event" in text


def test_configure_logging_replaces_its_handler(tmp_path: Path, restore_package_logger) -> None:
    logging_setup.configure_logging(tmp_path)
    logging_setup.configure_logging(tmp_path)
    owned = [h for h in restore_package_logger.handlers if h is logging_setup._HANDLER]
    assert len(owned) == 1
    assert len(restore_package_logger.handlers) == 1


def test_spans_record_status_and_are_bounded() -> None:
    tracing.set_span_limit(2)
    try:
        with tracing.span("bus.call", member="A"):
            pass
        with pytest.raises(ValueError):
            with tracing.span("bus.call", member="B"):
                raise ValueError("boom")
        with tracing.span("bus.emit", member="C"):
            pass
        spans = tracing.get_recent_spans()
        assert [item["attrs"]["member"] for item in spans] == ["B", "C"]
        assert spans[0]["status"] == "error"
        assert spans[0]["error"] == "boom"
        assert spans[1]["duration_ms"] >= 0
    finally:
        tracing.set_span_limit(256)
