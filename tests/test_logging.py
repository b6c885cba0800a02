"""
Tests for log formatting and credential masking.
"""

import json
import logging

from shanti.core.logging_config import (
    FILTERED,
    JSONFormatter,
    filter_sensitive_data,
    truncate_large_data,
)

MIDDLEWARE_LOGGER = "shanti.middleware.logging_middleware"


class TestFilterSensitiveData:

    def test_masks_credentials(self):
        data = {"username": "alice", "password": "secret123", "authToken": "abc"}
        assert filter_sensitive_data(data) == {
            "username": "alice", "password": FILTERED, "authToken": FILTERED
        }

    def test_nested_and_lists(self):
        data = {"users": [{"name": "a", "api_key": "k"}], "meta": {"Authorization": "Bearer x"}}
        filtered = filter_sensitive_data(data)
        assert filtered["users"][0] == {"name": "a", "api_key": FILTERED}
        assert filtered["meta"]["Authorization"] == FILTERED

    def test_does_not_mutate_input(self):
        data = {"password": "secret123"}
        filter_sensitive_data(data)
        assert data == {"password": "secret123"}

    def test_custom_keys(self):
        assert filter_sensitive_data({"pin": "1234", "password": "x"}, ["pin"]) == {
            "pin": FILTERED, "password": "x"
        }


def test_truncate_large_data():
    assert truncate_large_data("short", max_length=10) == "short"
    truncated = truncate_large_data("x" * 20, max_length=10)
    assert truncated.startswith("x" * 10)
    assert "total length: 20" in truncated


def test_json_formatter_filters_extra_fields():
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.extra_fields = {"user": "alice", "token": "abc"}
    data = json.loads(JSONFormatter().format(record))
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["user"] == "alice"
    assert data["token"] == FILTERED


class TestRequestLogging:

    def _records(self, caplog):
        return [r for r in caplog.records if r.name == MIDDLEWARE_LOGGER]

    def test_password_never_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        client.post(
            "/auth?action=register",
            json={"username": "alice", "email": "alice@example.com", "password": "hunter22"},
        )
        client.post("/auth?action=login", json={"username": "alice", "password": "hunter22"})

        records = self._records(caplog)
        assert len(records) == 2
        for record in records:
            assert "hunter22" not in record.getMessage()
            assert "hunter22" not in json.dumps(record.extra_fields, default=str)
        assert records[1].extra_fields["action"] == "login"
        assert records[1].extra_fields["status_code"] == 200
        assert json.loads(records[1].extra_fields["response_body"])["token"] == FILTERED

    def test_token_masked_in_query(self, client, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        client.get("/auth", params={"action": "verify", "token": "deadbeef"})

        record = self._records(caplog)[-1]
        assert record.levelno == logging.WARNING
        assert record.extra_fields["query_params"] == {"action": "verify", "token": FILTERED}
        assert "deadbeef" not in record.getMessage()
        assert record.extra_fields["error_reason"] == "invalid token"

    def test_error_reason_in_message(self, client, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        client.post("/auth?action=bogus", json={})

        record = self._records(caplog)[-1]
        assert "error_reason=Invalid action" in record.getMessage()

    def test_health_not_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger=MIDDLEWARE_LOGGER)
        client.get("/health")
        assert self._records(caplog) == []
