# tests/unit/test_infrastructure.py
# Unit tests for infrastructure components

import json
import logging

import pytest


class TestRateLimiter:
    """Test rate limiter implementation."""

    def test_sliding_window_allows_requests_under_limit(self):
        from filmshare.middleware.rate_limiter import SlidingWindowCounter

        limiter = SlidingWindowCounter(window_size=60, max_requests=10)

        # First 10 requests should be allowed
        for i in range(10):
            allowed, remaining = limiter.is_allowed("test_client")
            assert allowed, f"Request {i+1} should be allowed"

        # 11th request should be rejected
        allowed, remaining = limiter.is_allowed("test_client")
        assert not allowed, "11th request should be rejected"
        assert remaining == 0

    def test_different_clients_have_separate_limits(self):
        from filmshare.middleware.rate_limiter import SlidingWindowCounter

        limiter = SlidingWindowCounter(window_size=60, max_requests=5)

        for _ in range(5):
            limiter.is_allowed("client1")

        allowed, _ = limiter.is_allowed("client2")
        assert allowed, "Different client should have separate limit"

    def test_cleanup_removes_old_entries(self):
        from filmshare.middleware.rate_limiter import SlidingWindowCounter

        limiter = SlidingWindowCounter(window_size=60, max_requests=10)
        limiter.is_allowed("old_client")

        # Very old window
        limiter._counters["old_client"] = (0, 1, 0)

        limiter.cleanup_old_entries(max_age=60)

        assert "old_client" not in limiter._counters


class TestErrorHandler:
    """Test error handler classes."""

    def test_app_error_has_correct_properties(self):
        from filmshare.middleware.error_handler import AppError

        error = AppError(
            message="Test error",
            error_code="TEST_ERROR",
            status_code=400,
            details={"field": "value"}
        )

        assert error.message == "Test error"
        assert error.error_code == "TEST_ERROR"
        assert error.status_code == 400
        assert error.details == {"field": "value"}

    def test_registry_unavailable_defaults(self):
        from filmshare.middleware.error_handler import RegistryUnavailableError

        error = RegistryUnavailableError()

        assert error.error_code == "REGISTRY_UNAVAILABLE"
        assert error.status_code == 503

    def test_validation_error_defaults(self):
        from filmshare.middleware.error_handler import ValidationError

        error = ValidationError("Invalid input")

        assert error.error_code == "VALIDATION_ERROR"
        assert error.status_code == 400

    def test_share_decode_error_carries_kind(self):
        from filmshare.middleware.error_handler import ShareDecodeError
        from filmshare.services.errors import DecodeErrorKind

        error = ShareDecodeError(DecodeErrorKind.TOO_MANY_ITEMS)

        assert error.kind is DecodeErrorKind.TOO_MANY_ITEMS
        assert error.error_code == "TOO_MANY_ITEMS"
        assert error.message == "Too many items (max 10,000)"
        assert error.status_code == 400

    def test_create_error_response_structure(self):
        from filmshare.middleware.error_handler import create_error_response

        response = create_error_response(
            error_code="TEST",
            message="Test message",
            status_code=400,
            details={"key": "value"},
            request_id="req-123"
        )

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body == {
            "error": {
                "code": "TEST",
                "message": "Test message",
                "details": {"key": "value"},
                "request_id": "req-123",
            }
        }

    def test_create_error_response_omits_empty_details(self):
        from filmshare.middleware.error_handler import create_error_response

        body = json.loads(create_error_response("TEST", "m", 404).body)
        assert body == {"error": {"code": "TEST", "message": "m"}}


class TestSettings:
    """Test settings validation."""

    def test_share_origin_trailing_slash_is_stripped(self):
        from filmshare.config import Settings

        assert Settings(SHARE_ORIGIN="https://films.example.org/").SHARE_ORIGIN == "https://films.example.org"

    def test_log_level_is_normalized(self):
        from filmshare.config import Settings

        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_unknown_log_level_rejected(self):
        from pydantic import ValidationError
        from filmshare.config import Settings

        with pytest.raises(ValidationError):
            Settings(LOG_LEVEL="chatty")


class TestLogging:
    """Test JSON logging configuration."""

    def test_file_loggers_switch_to_json(self):
        from pythonjsonlogger.jsonlogger import JsonFormatter
        from filmshare import config
        from filmshare.observability.logger import configure_logging
        import filmshare.utils.logger  # noqa: F401  sets up access/error handlers

        configure_logging(config)

        for name in ("access", "error"):
            lg = logging.getLogger(name)
            assert lg.handlers
            assert not lg.propagate
            assert all(isinstance(h.formatter, JsonFormatter) for h in lg.handlers)
