"""
Async GraphQL client for the Dutchie Plus inventory API.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import httpx

from shared.config import SpecialsSettings
from shared.errors import GraphQLError, UpstreamHTTPError, UpstreamTimeoutError
from shared.logging import get_logger


class DutchieClient:
    """Issues single-attempt, time-bounded GraphQL requests."""

    def __init__(
        self,
        settings: SpecialsSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_url = settings.dutchie_api_url
        self.default_timeout = settings.request_timeout_seconds
        self.logger = get_logger("specials.dutchie_client")
        self._client = httpx.AsyncClient(
            timeout=self.default_timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {settings.dutchie_api_key}",
            },
        )

    async def __aenter__(self) -> "DutchieClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def execute_query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        POST a GraphQL document and return its ``data`` payload.

        The whole request is bounded by ``timeout`` seconds (the configured
        default when omitted). Raises UpstreamTimeoutError, UpstreamHTTPError
        or GraphQLError; never retries.
        """
        budget = self.default_timeout if timeout is None else timeout
        timeout_ms = int(round(budget * 1000))
        body = {"query": query, "variables": variables or {}}

        try:
            response = await asyncio.wait_for(
                self._client.post(self.api_url, json=body, timeout=budget),
                timeout=budget,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            self.logger.warning("Inventory API request timed out", timeout_ms=timeout_ms)
            raise UpstreamTimeoutError(timeout_ms) from exc
        except httpx.HTTPError as exc:
            self.logger.error("Inventory API transport error", error=str(exc))
            raise UpstreamHTTPError(f"Transport error: {exc}") from exc

        text = response.text
        if not response.is_success:
            self.logger.error(
                "Inventory API request failed",
                status_code=response.status_code,
                response=text,
            )
            raise UpstreamHTTPError.from_status(response.status_code, text)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UpstreamHTTPError(
                f"Invalid JSON response: {exc}",
                status_code=response.status_code,
                body=text,
            ) from exc

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            messages = [str(error.get("message", error)) if isinstance(error, dict) else str(error) for error in errors]
            raise GraphQLError(messages)

        if not isinstance(payload, dict):
            return {}
        return payload.get("data") or {}
