"""
Shared error handling for the dispensary specials service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class SpecialsException(Exception):
    """Base exception for the specials service."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class UpstreamError(SpecialsException):
    """Base class for failures talking to the inventory API."""


class UpstreamTimeoutError(UpstreamError):
    """No response arrived within the request budget."""

    def __init__(self, timeout_ms: int, details: Optional[Dict[str, Any]] = None):
        self.timeout_ms = timeout_ms
        super().__init__("UPSTREAM_TIMEOUT", f"Request timeout after {timeout_ms}ms", details)


class UpstreamHTTPError(UpstreamError):
    """Non-success HTTP status or transport failure."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.body = body
        payload = {"status_code": status_code, "body": body}
        payload.update(details or {})
        super().__init__("UPSTREAM_HTTP_ERROR", message, payload)

    @classmethod
    def from_status(cls, status_code: int, body: str) -> "UpstreamHTTPError":
        return cls(f"API Error: {status_code} - {body}", status_code=status_code, body=body)


class GraphQLError(UpstreamError):
    """The response carried an application-level error list."""

    def __init__(self, messages: list, details: Optional[Dict[str, Any]] = None):
        self.messages = list(messages)
        super().__init__(
            "GRAPHQL_ERROR",
            f"GraphQL Error: {', '.join(self.messages)}",
            details or {"messages": self.messages},
        )


class CacheUnavailableError(SpecialsException):
    """The key-value cache is missing or failed an operation."""

    def __init__(self, message: str = "Cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_UNAVAILABLE", message, details)
