"""
Unit tests for shared errors and logging helpers.
"""

import json
import logging

from shared.errors import (
    CacheUnavailableError,
    GraphQLError,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from shared.logging import (
    add_correlation_context,
    clear_context,
    configure_logging,
    get_logger,
    set_request_id,
)


class TestErrors:
    """Test cases for the shared error hierarchy."""

    def test_upstream_errors_share_a_base(self):
        assert issubclass(UpstreamTimeoutError, UpstreamError)
        assert issubclass(UpstreamHTTPError, UpstreamError)
        assert issubclass(GraphQLError, UpstreamError)
        assert not issubclass(CacheUnavailableError, UpstreamError)

    def test_timeout_to_response(self):
        response = UpstreamTimeoutError(10000).to_response()

        assert response.code == "UPSTREAM_TIMEOUT"
        assert response.message == "Request timeout after 10000ms"

    def test_http_error_details(self):
        error = UpstreamHTTPError.from_status(429, "slow down")

        assert error.details == {"status_code": 429, "body": "slow down"}
        assert error.to_response().code == "UPSTREAM_HTTP_ERROR"


class TestCorrelationContext:
    """Test cases for request correlation in log events."""

    def test_request_id_added_to_events(self):
        request_id = set_request_id("req-123")
        try:
            event = add_correlation_context(None, "info", {"event": "Fetched stores"})
        finally:
            clear_context()

        assert request_id == "req-123"
        assert event["request_id"] == "req-123"

    def test_no_request_id_after_clear(self):
        set_request_id()
        clear_context()

        event = add_correlation_context(None, "info", {"event": "Fetched stores"})

        assert "request_id" not in event


class TestConfigureLogging:
    """Test cases for the structlog configuration."""

    def test_renders_json_with_iso_timestamp_and_service(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging("specials", "info")

        get_logger("specials.tests").info("Fetched stores", count=3)

        event = json.loads(caplog.records[-1].getMessage())
        assert event["event"] == "Fetched stores"
        assert event["count"] == 3
        assert event["service"] == "specials"
        assert isinstance(event["timestamp"], str)
        assert "T" in event["timestamp"]
