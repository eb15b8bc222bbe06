"""Tests for both log formatters and setup_logging()."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from app.core.logging import (
    _ContainerFormatter,
    _JsonFormatter,
    _RequestContextFilter,
    request_id_var,
    setup_logging,
)


def _record(
    level: int = logging.INFO,
    msg: str = "message",
    args: tuple = (),
    *,
    name: str = "app.services.analytics_service",
    pathname: str = "analytics_service.py",
    lineno: int = 1,
    exc_info=None,
) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ---- setup_logging ----


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("error")
    assert logging.getLogger().level == logging.ERROR


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


@pytest.mark.parametrize(
    "json_format,formatter_type",
    [(False, _ContainerFormatter), (True, _JsonFormatter)],
)
def test_setup_logging_selects_formatter(
    json_format: bool, formatter_type: type
) -> None:
    setup_logging("info", json_format=json_format)
    [handler] = logging.getLogger().handlers
    assert isinstance(handler.formatter, formatter_type)


@pytest.mark.parametrize(
    "level_name,expected", [("debug", logging.WARNING), ("error", logging.ERROR)]
)
def test_setup_logging_keeps_server_loggers_quiet(
    level_name: str, expected: int
) -> None:
    setup_logging(level_name)
    assert logging.getLogger("uvicorn.access").level == expected
    assert logging.getLogger("httpx").level == expected


# ---- container format ----


def test_container_format_is_plain_text() -> None:
    output = _ContainerFormatter().format(
        _record(msg="Dashboard computed user=%s", args=("learner-1",))
    )
    assert "INFO" in output
    assert "app.services.analytics_service" in output
    assert "Dashboard computed user=learner-1" in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output)


def test_container_format_omits_location_below_warning() -> None:
    output = _ContainerFormatter().format(_record(lineno=7))
    assert "[analytics_service.py:" not in output


@pytest.mark.parametrize("level", [logging.WARNING, logging.ERROR])
def test_container_format_adds_location_from_warning(level: int) -> None:
    output = _ContainerFormatter().format(_record(level, lineno=132))
    assert "[analytics_service.py:132]" in output


def test_container_format_timestamp_has_milliseconds() -> None:
    output = _ContainerFormatter().format(_record())
    timestamp = output.split(" ", 1)[0]
    # e.g. 2025-11-19T15:30:00.123+0000
    assert timestamp[19] == "."
    assert timestamp[20:23].isdigit()


# ---- JSON format ----


def test_json_format_core_fields() -> None:
    parsed = json.loads(
        _JsonFormatter().format(
            _record(msg="Analytics calculated user=%s", args=("learner-1",))
        )
    )
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "app.services.analytics_service"
    assert parsed["message"] == "Analytics calculated user=learner-1"
    assert "timestamp" in parsed


def test_json_format_promotes_request_context() -> None:
    record = _record(name="app.middleware.request_context")
    record.request_id = "req-42"  # type: ignore[attr-defined]
    record.method = "GET"  # type: ignore[attr-defined]
    record.path = "/v1/analytics/overview"  # type: ignore[attr-defined]
    record.user_id = "learner-1"  # type: ignore[attr-defined]
    record.status_code = 200  # type: ignore[attr-defined]
    record.duration_ms = 3.2  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "req-42"
    assert parsed["method"] == "GET"
    assert parsed["path"] == "/v1/analytics/overview"
    assert parsed["user_id"] == "learner-1"
    assert parsed["status_code"] == 200
    assert parsed["duration_ms"] == 3.2


def test_json_format_skips_absent_context() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert "user_id" not in parsed
    assert "request_id" not in parsed


def test_json_format_keeps_non_ascii_text() -> None:
    output = _JsonFormatter().format(_record(msg="unlocked 🐦 Early Bird"))
    assert "🐦" in output
    assert json.loads(output)["message"] == "unlocked 🐦 Early Bird"


def test_json_format_includes_exception() -> None:
    try:
        raise ZeroDivisionError("division by zero")
    except ZeroDivisionError:
        record = _record(
            logging.ERROR, "Overview calculation failed", exc_info=sys.exc_info()
        )
    parsed = json.loads(_JsonFormatter().format(record))
    assert "ZeroDivisionError: division by zero" in parsed["exception"]


# ---- request context filter ----


def test_context_filter_stamps_current_request_id() -> None:
    record = _record()
    token = request_id_var.set("req-7")
    try:
        _RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)
    assert record.request_id == "req-7"  # type: ignore[attr-defined]


def test_context_filter_defaults_outside_request() -> None:
    record = _record()
    _RequestContextFilter().filter(record)
    assert record.request_id == "-"  # type: ignore[attr-defined]


def test_context_filter_keeps_explicit_request_id() -> None:
    record = _record()
    record.request_id = "explicit"  # type: ignore[attr-defined]
    _RequestContextFilter().filter(record)
    assert record.request_id == "explicit"  # type: ignore[attr-defined]


def test_setup_logging_installs_context_filter_on_handler() -> None:
    setup_logging("info")
    [handler] = logging.getLogger().handlers
    assert any(isinstance(f, _RequestContextFilter) for f in handler.filters)
