"""Tests for the JSON log formatter and StructuredLogger."""

import io
import json
import logging

import pytest

from sitepass.config import reset_config
from sitepass.logger import JSONFormatter, StructuredLogger, qualified_name


def make_record(msg="hello %s", args=("world",), **extra):
    record = logging.LogRecord(
        name="sitepass.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg=msg, args=args, exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
def test_formatter_emits_json_line():
    entry = json.loads(JSONFormatter().format(make_record()))

    assert entry["level"] == "INFO"
    assert entry["logger_name"] == "sitepass.test"
    assert entry["message"] == "hello world"
    assert entry["timestamp"].endswith("+00:00")
    assert "extra" not in entry


@pytest.mark.unit
def test_formatter_includes_extra_fields_as_strings():
    entry = json.loads(JSONFormatter().format(make_record(event="SIGN_IN_REQUESTED", count=3)))
    assert entry["extra"] == {"event": "SIGN_IN_REQUESTED", "count": "3"}


@pytest.mark.unit
def test_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        import sys
        record = make_record()
        record.exc_info = sys.exc_info()

    entry = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in entry["exception"]


@pytest.mark.unit
def test_structured_logger_writes_stream_and_file(tmp_path):
    stream = io.StringIO()
    log_file = tmp_path / "logs" / "kiosk.log"

    log = StructuredLogger(name="sitepass.test.file", stream=stream, log_file=str(log_file))
    log.info("Sign-out requested", extra={"event": "SIGN_OUT_REQUESTED"})
    for handler in log.logger.handlers:
        handler.flush()

    assert json.loads(stream.getvalue())["extra"]["event"] == "SIGN_OUT_REQUESTED"
    assert "Sign-out requested" in log_file.read_text(encoding="utf-8")

    for handler in list(log.logger.handlers):
        handler.close()
        log.logger.removeHandler(handler)


def _close_handlers(log):
    for handler in list(log.logger.handlers):
        handler.close()
        log.logger.removeHandler(handler)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [("dashboard", "sitepass.dashboard"), ("sitepass", "sitepass"), ("sitepass.realtime", "sitepass.realtime")],
)
def test_component_loggers_share_namespace(name, expected):
    assert qualified_name(name) == expected


@pytest.mark.unit
def test_child_logger_does_not_duplicate_through_parent(tmp_path):
    parent_stream, child_stream = io.StringIO(), io.StringIO()
    parent = StructuredLogger(name="sitepass.test.parent", stream=parent_stream, log_file=str(tmp_path / "p.log"))
    child = StructuredLogger(name="sitepass.test.parent.child", stream=child_stream, log_file=str(tmp_path / "c.log"))

    child.info("Fob returned")

    assert "Fob returned" in child_stream.getvalue()
    assert parent_stream.getvalue() == ""
    _close_handlers(child)
    _close_handlers(parent)


@pytest.mark.unit
def test_level_comes_from_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    reset_config()
    try:
        log = StructuredLogger(name="sitepass.test.level", stream=io.StringIO(), log_file=str(tmp_path / "l.log"))
        assert log.logger.level == logging.WARNING
        _close_handlers(log)
    finally:
        monkeypatch.delenv("LOG_LEVEL")
        reset_config()
