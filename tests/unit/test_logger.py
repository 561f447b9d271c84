import json
import logging

import pytest

from context import clear_context, set_request_context
from logger import REDACTED, JSONFormatter, redact

pytestmark = pytest.mark.unit


def _record(**extra):
    record = logging.LogRecord("shop-api", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_redact_nested_secrets():
    value = {"email": "a@example.com", "password_hash": "x", "nested": {"Authorization": "Bearer t"}}
    assert redact(value) == {"email": "a@example.com", "password_hash": REDACTED, "nested": {"Authorization": REDACTED}}


def test_formatter_emits_json_with_context_and_extra():
    set_request_context(request_id="req-1", method="GET", path="/users")
    try:
        payload = json.loads(JSONFormatter().format(_record(token="abc", status_code=200)))
    finally:
        clear_context()

    assert payload["message"] == "hello world"
    assert payload["request_id"] == "req-1"
    assert payload["path"] == "/users"
    assert payload["status_code"] == 200
    assert payload["token"] == REDACTED


def test_formatter_without_context():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "request_id" not in payload
