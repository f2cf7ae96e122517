"""
Tests for structured logging.

Tests:
- Masking of credentials and contact details
- JSON formatter output
- Request logging with the acting identity
"""

import json
import logging
import sys
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.config import settings
from core.middleware.authentication import AuthenticationMiddleware
from core.middleware.logging import (
    StructuredFormatter,
    StructuredLoggingMiddleware,
    is_sensitive_field,
    mask_headers,
    mask_sensitive_data,
    should_log_request,
)


class TestMasking:
    """Test sensitive data masking."""

    @pytest.mark.parametrize(
        "field_name,expected",
        [
            ("password", True),
            ("access_token", True),
            ("X-API-Key", True),
            ("client_secret", True),
            ("Cookie", True),
            ("title", False),
            ("cover_letter", False),
        ],
    )
    def test_sensitive_field_detection(self, field_name, expected):
        assert is_sensitive_field(field_name) is expected

    def test_dict_values_masked(self):
        masked = mask_sensitive_data(
            {"title": "Engineer", "token": "abc", "nested": {"password": "x"}}
        )

        assert masked == {
            "title": "Engineer",
            "token": "[REDACTED]",
            "nested": {"password": "[REDACTED]"},
        }

    def test_contact_details_masked_in_text(self):
        masked = mask_sensitive_data(
            {"cover_letter": "Reach me at jane@example.com or +1 555 123 4567"}
        )

        assert "jane@example.com" not in masked["cover_letter"]
        assert "[EMAIL]" in masked["cover_letter"]
        assert "[PHONE]" in masked["cover_letter"]

    def test_lists_masked(self):
        assert mask_sensitive_data([{"secret": 1}, "plain"]) == [
            {"secret": "[REDACTED]"},
            "plain",
        ]

    def test_max_depth(self):
        data = {"a": {"b": {"c": "d"}}}
        assert mask_sensitive_data(data, max_depth=1) == {
            "a": {"b": "[MAX_DEPTH_EXCEEDED]"}
        }

    def test_authorization_header_keeps_scheme(self):
        masked = mask_headers(
            {"Authorization": "Bearer eyJ.abc.def", "Accept": "application/json"}
        )

        assert masked == {
            "Authorization": "Bearer [REDACTED]",
            "Accept": "application/json",
        }

    def test_cookie_header_masked(self):
        assert mask_headers({"cookie": "session=1"}) == {"cookie": "[REDACTED]"}

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/health", False),
            ("/api/ready", False),
            ("/api/jobs", True),
            ("/api/interviews/upcoming", True),
        ],
    )
    def test_should_log_request(self, path, expected):
        assert should_log_request(path) is expected


class TestStructuredFormatter:
    """Test JSON log formatting."""

    def test_basic_record(self):
        record = logging.LogRecord(
            "api.services.jobs", logging.INFO, __file__, 1, "Closed %d jobs", (3,), None
        )
        record.request_id = "req-1"

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "api.services.jobs"
        assert data["message"] == "Closed 3 jobs"
        assert data["request_id"] == "req-1"

    def test_exception_info(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord(
                "x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        data = json.loads(StructuredFormatter().format(record))

        assert data["exception"]["type"] == "ValueError"
        assert data["exception"]["message"] == "bad"


@pytest.fixture
def client():
    app = FastAPI()

    @app.get("/api/jobs")
    async def list_jobs():
        return {"items": []}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=settings.jwt_secret_key,
        jwt_algorithm=settings.jwt_algorithm,
    )
    app.add_middleware(StructuredLoggingMiddleware)
    return TestClient(app)


def logged_events(caplog) -> list[dict]:
    events = []
    for record in caplog.records:
        if record.name != "core.middleware.logging":
            continue
        try:
            events.append(json.loads(record.getMessage()))
        except json.JSONDecodeError:
            continue
    return events


class TestStructuredLoggingMiddleware:
    """Test request/response logging."""

    def test_request_pair_logged_with_identity(self, client, caplog, token_factory):
        token = token_factory("employer-1", "EMPLOYER")

        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            response = client.get(
                "/api/jobs", headers={"Authorization": f"Bearer {token}"}
            )

        assert response.status_code == 200
        events = logged_events(caplog)
        started = next(e for e in events if e["event"] == "request_started")
        completed = next(e for e in events if e["event"] == "request_completed")

        assert started["path"] == "/api/jobs"
        assert started["headers"]["authorization"] == "Bearer [REDACTED]"
        assert completed["status_code"] == 200
        assert completed["user_id"] == "employer-1"
        assert completed["role"] == "EMPLOYER"
        assert token not in caplog.text

    def test_anonymous_request_has_no_user(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.get("/api/jobs")

        completed = next(
            e for e in logged_events(caplog) if e["event"] == "request_completed"
        )
        assert "user_id" not in completed

    def test_request_id_generated_and_preserved(self, client):
        generated = client.get("/api/jobs")
        assert generated.headers["x-request-id"]

        preserved = client.get("/api/jobs", headers={"x-request-id": "req-42"})
        assert preserved.headers["x-request-id"] == "req-42"

    def test_health_checks_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            response = client.get("/health")

        assert response.status_code == 200
        assert logged_events(caplog) == []

    def test_client_errors_logged_as_warning(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.get("/api/missing")

        warnings = [
            r for r in caplog.records
            if r.name == "core.middleware.logging" and r.levelno == logging.WARNING
        ]
        assert len(warnings) == 1
        assert json.loads(warnings[0].getMessage())["status_code"] == 404
