"""Error taxonomy for the query client.

Every exception that crosses the client boundary carries a human-readable
`message` that is safe to show an end user; diagnostic detail is logged and
chained via `__cause__`, never embedded in the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorClass(str, Enum):
    configuration = "configuration"
    authentication = "authentication"
    rate_limit = "rate_limit"
    transport = "transport"
    unknown = "unknown"


class QueryClientError(Exception):
    """Base for all errors raised by the query client."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(QueryClientError):
    """Missing/invalid credential or an uninitialized transport. Never retried."""


class AuthenticationError(QueryClientError):
    """The completion service rejected the credential. Never retried."""

    hint = "Verify GROQ_API_KEY is correct in the environment."

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or f"The AI service rejected the configured API key. {self.hint}"
        )


class RateLimitError(QueryClientError):
    """Throttled by the completion service; retried with backoff."""


class TransportError(QueryClientError):
    """Network-level failure (timeout, refused, unreachable); retried with backoff."""


class EmptyResponseError(QueryClientError):
    """The service answered without any content."""

    def __init__(self, message: str = "No response from the AI service."):
        super().__init__(message)


class ExhaustedRetriesError(QueryClientError):
    """All attempts consumed; wraps the last underlying error."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class ParseError(QueryClientError):
    """Structured output was not valid JSON or violated the expected schema."""

    def __init__(self, message: str, *, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "EmptyResponseError",
    "ErrorClass",
    "ExhaustedRetriesError",
    "ParseError",
    "QueryClientError",
    "RateLimitError",
    "TransportError",
]
