"""
Unit tests for the Dutchie GraphQL client.
"""

import asyncio
import json

import httpx
import pytest

from service_specials.app.adapters.dutchie_client import DutchieClient
from service_specials.app.adapters.queries import SPECIALS_QUERY, STORES_QUERY
from shared.config import SpecialsSettings
from shared.errors import GraphQLError, UpstreamError, UpstreamHTTPError, UpstreamTimeoutError


API_URL = "https://inventory.example.com/graphql"


def _settings(**overrides) -> SpecialsSettings:
    values = {
        "dutchie_api_url": API_URL,
        "dutchie_api_key": "test-token",
        "request_timeout_seconds": 10.0,
    }
    values.update(overrides)
    return SpecialsSettings(**values)


def _client(handler, **overrides) -> DutchieClient:
    return DutchieClient(_settings(**overrides), transport=httpx.MockTransport(handler))


class TestDutchieClient:
    """Test cases for DutchieClient."""

    @pytest.mark.asyncio
    async def test_returns_data_payload(self):
        """Successful responses yield the data object."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"retailers": [{"id": "r1", "name": "One"}]}})

        async with _client(handler) as client:
            data = await client.execute_query(STORES_QUERY)

        assert data == {"retailers": [{"id": "r1", "name": "One"}]}
        assert seen["method"] == "POST"
        assert seen["url"] == API_URL
        assert seen["auth"] == "Bearer test-token"
        assert seen["body"] == {"query": STORES_QUERY, "variables": {}}

    @pytest.mark.asyncio
    async def test_sends_variables(self):
        """Query variables are forwarded in the request body."""
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"menu": {"products": []}}})

        async with _client(handler) as client:
            await client.execute_query(SPECIALS_QUERY, {"retailerId": "r-42"})

        assert bodies[0]["variables"] == {"retailerId": "r-42"}

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Non-2xx responses raise UpstreamHTTPError with status and body."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="upstream unavailable")

        async with _client(handler) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.execute_query(STORES_QUERY)

        assert exc_info.value.status_code == 503
        assert exc_info.value.body == "upstream unavailable"
        assert str(exc_info.value) == "API Error: 503 - upstream unavailable"

    @pytest.mark.asyncio
    async def test_graphql_errors(self):
        """A non-empty errors list raises GraphQLError with joined messages."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "data": None,
                "errors": [{"message": "Retailer not found"}, {"message": "Unauthorized"}],
            })

        async with _client(handler) as client:
            with pytest.raises(GraphQLError) as exc_info:
                await client.execute_query(SPECIALS_QUERY, {"retailerId": "missing"})

        assert exc_info.value.messages == ["Retailer not found", "Unauthorized"]
        assert str(exc_info.value) == "GraphQL Error: Retailer not found, Unauthorized"
        assert exc_info.value.code == "GRAPHQL_ERROR"

    @pytest.mark.asyncio
    async def test_empty_errors_list_is_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": {"retailers": []}, "errors": []})

        async with _client(handler) as client:
            assert await client.execute_query(STORES_QUERY) == {"retailers": []}

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Requests exceeding the budget are abandoned with UpstreamTimeoutError."""
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json={"data": {}})

        async with _client(handler) as client:
            with pytest.raises(UpstreamTimeoutError) as exc_info:
                await client.execute_query(STORES_QUERY, timeout=0.05)

        assert str(exc_info.value) == "Request timeout after 50ms"
        assert exc_info.value.timeout_ms == 50

    @pytest.mark.asyncio
    async def test_default_timeout_message(self):
        """httpx timeouts map onto the configured budget."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamTimeoutError, match="Request timeout after 10000ms"):
                await client.execute_query(STORES_QUERY)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.execute_query(STORES_QUERY)

        assert exc_info.value.status_code is None
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        async with _client(handler) as client:
            with pytest.raises(UpstreamHTTPError) as exc_info:
                await client.execute_query(STORES_QUERY)

        assert exc_info.value.status_code == 200
        assert isinstance(exc_info.value, UpstreamError)

    @pytest.mark.asyncio
    async def test_missing_data_returns_empty_dict(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            assert await client.execute_query(STORES_QUERY) == {}
