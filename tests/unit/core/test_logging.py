"""
Tests for structured logging middleware.
Tests sensitive field detection, PII masking and request logging.
"""

import json
import logging
import sys
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.middleware.logging import (
    StructuredFormatter,
    StructuredLoggingMiddleware,
    is_sensitive_field,
    mask_headers,
    mask_sensitive_data,
    setup_logging,
    should_log_request,
)


class TestSensitiveFieldDetection:
    """Test sensitive field name detection."""

    @pytest.mark.parametrize("field_name,expected", [
        ("password", True),
        ("Password", True),
        ("access_token", True),
        ("client_secret", True),
        ("Authorization", True),
        ("cookie", True),
        ("phone_number", True),
        ("email", False),
        ("name", False),
        ("application_id", False),
        ("status", False),
        ("content", False),
    ])
    def test_sensitive_field_patterns(self, field_name, expected):
        assert is_sensitive_field(field_name) == expected


class TestPIIMasking:
    """Test PII masking inside values."""

    def test_email_masking(self):
        masked = mask_sensitive_data("Contact john@example.com for help")
        assert masked == "Contact [EMAIL] for help"

    @pytest.mark.parametrize("text", [
        "Call 090-1234-5678",
        "+81 90 1234 5678",
        "+1-555-123-4567",
    ])
    def test_phone_number_masking(self, text):
        assert "[PHONE]" in mask_sensitive_data(text)

    def test_nested_structures(self):
        data = {
            "email": "dev@example.com",
            "password": "hunter22",
            "profile": {"phone_number": "090-1234-5678", "bio": "Python dev"},
            "tags": ["a@b.io", "plain"],
        }
        masked = mask_sensitive_data(data)

        assert masked["email"] == "[EMAIL]"
        assert masked["password"] == "[REDACTED]"
        assert masked["profile"]["phone_number"] == "[REDACTED]"
        assert masked["profile"]["bio"] == "Python dev"
        assert masked["tags"] == ["[EMAIL]", "plain"]

    def test_depth_limit(self):
        data = current = {}
        for _ in range(15):
            current["child"] = {}
            current = current["child"]

        masked = mask_sensitive_data(data)
        for _ in range(11):
            masked = masked["child"]
        assert masked == "[MAX_DEPTH_EXCEEDED]"

    def test_non_string_values_unchanged(self):
        assert mask_sensitive_data({"count": 3, "ok": True}) == {"count": 3, "ok": True}


class TestHeaderMasking:
    def test_authorization_keeps_scheme(self):
        masked = mask_headers({"Authorization": "Bearer abc.def.ghi", "Accept": "*/*"})

        assert masked["Authorization"] == "Bearer [REDACTED]"
        assert masked["Accept"] == "*/*"

    def test_cookie_fully_redacted(self):
        assert mask_headers({"Cookie": "session=abc"})["Cookie"] == "[REDACTED]"


class TestRequestFiltering:
    @pytest.mark.parametrize("path,expected", [
        ("/health", False),
        ("/metrics", False),
        ("/api/v1/applications", True),
    ])
    def test_should_log_request(self, path, expected):
        assert should_log_request(path) is expected


class TestStructuredLoggingMiddleware:
    """Test request logging end to end."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(StructuredLoggingMiddleware, log_request_body=True, max_body_size=1024)

        @app.post("/api/v1/messages")
        async def post_message(payload: dict):
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        return TestClient(app)

    def _events(self, caplog):
        events = []
        for record in caplog.records:
            try:
                events.append(json.loads(record.getMessage()))
            except ValueError:
                continue
        return events

    def test_request_id_generated_and_echoed(self, client):
        response = client.get("/health")
        assert response.headers["x-request-id"]

    def test_request_id_propagated(self, client):
        response = client.get("/health", headers={"x-request-id": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"

    def test_request_logged_with_masked_body(self, client, caplog):
        caplog.set_level(logging.INFO, logger="core.middleware.logging")
        client.post(
            "/api/v1/messages",
            json={"content": "call me at 090-1234-5678", "password": "x"},
            headers={"Authorization": "Bearer secret-token"},
        )
        events = self._events(caplog)
        started = next(e for e in events if e["event"] == "request_started")
        completed = next(e for e in events if e["event"] == "request_completed")

        assert started["body"]["password"] == "[REDACTED]"
        assert "[PHONE]" in started["body"]["content"]
        assert started["headers"]["authorization"] == "Bearer [REDACTED]"
        assert completed["status_code"] == 200
        assert completed["duration_ms"] >= 0

    def test_health_not_logged(self, client, caplog):
        caplog.set_level(logging.INFO, logger="core.middleware.logging")
        client.get("/health")
        assert self._events(caplog) == []


class TestLoggingSetup:
    def test_structured_formatter_outputs_json(self):
        record = logging.LogRecord("svc", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        record.request_id = "r-1"
        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["request_id"] == "r-1"

    def test_formatter_includes_exception(self):
        try:
            raise ValueError("bad input")
        except ValueError:
            record = logging.LogRecord("svc", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"

    def test_setup_logging_sets_level(self):
        setup_logging(log_level="WARNING", json_logs=True)
        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        setup_logging(log_level="INFO", json_logs=False)
