"""Tests for the JSON log formatter"""
import json
import logging

from app.utils.logger import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("codecoach", logging.INFO, __file__, 1, "Session logged out", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_extra_fields_are_included():
    """Test that request and session extras reach the JSON line"""
    line = json.loads(JSONFormatter().format(_record(
        user_id="123",
        action="logout",
        session_state="authenticated",
        path="/user/logout",
        method="POST",
    )))

    assert line["message"] == "Session logged out"
    assert line["logger"] == "codecoach"
    assert line["user_id"] == "123"
    assert line["session_state"] == "authenticated"
    assert line["path"] == "/user/logout"
    assert line["method"] == "POST"


def test_unknown_extras_are_dropped():
    line = json.loads(JSONFormatter().format(_record(password="secret")))
    assert "password" not in line
