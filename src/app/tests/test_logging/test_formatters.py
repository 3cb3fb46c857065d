# src/app/tests/test_logging/test_formatters.py
import json
import logging
import sys

from app.core.logging.formatters import ColorFormatter, JsonFormatter


def make_record(exc_info=None):
    # create a LogRecord that simulates formatting with args
    return logging.LogRecord("app", logging.INFO, __file__, 10, "hello %s", ("tester",), exc_info)


def test_json_formatter_basic_fields():
    rec = make_record()
    # simulate extra={"custom": "value"}
    rec.custom = "value"
    rec.request_id = "req-1"
    fmt = JsonFormatter(env="testing", service="svc")

    data = json.loads(fmt.format(rec))

    assert data["message"] == "hello tester"
    assert data["level"] == "INFO"
    assert data["service"] == "svc"
    assert data["env"] == "testing"
    assert "timestamp" in data
    assert data["request_id"] == "req-1"
    assert data["custom"] == "value"
    assert "version" in data
    # standard LogRecord attributes are not repeated as extras
    assert "args" not in data
    assert "msecs" not in data


def test_json_formatter_non_serializable_extra():
    rec = make_record()

    class X:
        def __repr__(self):
            return "<X>"

    rec.obj = X()
    data = json.loads(JsonFormatter(env="dev", service="svc").format(rec))
    # non-serializable obj is stringified
    assert data["obj"] == "<X>"


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad precio")
    except ValueError:
        rec = make_record(exc_info=sys.exc_info())

    data = json.loads(JsonFormatter(env="dev").format(rec))
    assert "ValueError: bad precio" in data["exc_info"]


def test_color_formatter_restores_levelname():
    rec = make_record()
    rec.request_id = "-"
    out = ColorFormatter("%(levelname)s | %(message)s").format(rec)

    assert "\033[32m" in out
    assert out.endswith("hello tester")
    assert rec.levelname == "INFO"
