"""Failure classification for completion calls.

Typed information is consulted first (our own error types, the `openai` SDK's
exception hierarchy, HTTP status codes, OS-level error codes). Message
substrings are only a fallback for untyped exceptions, and anything
unrecognized lands in `ErrorClass.unknown`, which is still retried.
"""

from __future__ import annotations

import errno
from typing import Dict, Optional, Tuple

import openai

from .errors import (
    AuthenticationError,
    ConfigurationError,
    EmptyResponseError,
    ErrorClass,
    QueryClientError,
    RateLimitError,
    TransportError,
)

STATUS_CODES: Dict[int, ErrorClass] = {
    401: ErrorClass.authentication,
    429: ErrorClass.rate_limit,
}

CONNECTION_CODES = frozenset({"ECONNREFUSED", "ENOTFOUND", "ETIMEDOUT", "ECONNRESET"})

CONNECTION_ERRNOS = frozenset(
    {errno.ECONNREFUSED, errno.ETIMEDOUT, errno.ECONNRESET, errno.EHOSTUNREACH, errno.ENETUNREACH}
)

# Checked in order; first match wins.
MESSAGE_PATTERNS: Tuple[Tuple[ErrorClass, Tuple[str, ...]], ...] = (
    (ErrorClass.authentication, ("401", "unauthorized", "invalid api key", "authentication")),
    (ErrorClass.rate_limit, ("429", "rate limit", "too many requests")),
    (
        ErrorClass.transport,
        (
            "timeout",
            "network",
            "econnrefused",
            "enotfound",
            "etimedout",
            "connection error",
            "socket hang up",
        ),
    ),
)

NON_RETRYABLE = frozenset({ErrorClass.authentication, ErrorClass.configuration})

_OWN_TYPES: Tuple[Tuple[type, ErrorClass], ...] = (
    (ConfigurationError, ErrorClass.configuration),
    (AuthenticationError, ErrorClass.authentication),
    (RateLimitError, ErrorClass.rate_limit),
    (TransportError, ErrorClass.transport),
    (EmptyResponseError, ErrorClass.unknown),
)


def _classify_typed(exc: BaseException) -> Optional[ErrorClass]:
    for cls, error_class in _OWN_TYPES:
        if isinstance(exc, cls):
            return error_class
    if isinstance(exc, QueryClientError):
        return ErrorClass.unknown

    # APITimeoutError subclasses APIConnectionError.
    if isinstance(exc, openai.APIConnectionError):
        return ErrorClass.transport
    if isinstance(exc, openai.APIStatusError):
        return STATUS_CODES.get(exc.status_code, ErrorClass.unknown)

    code = getattr(exc, "code", None)
    if isinstance(code, str) and code.upper() in CONNECTION_CODES:
        return ErrorClass.transport
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return ErrorClass.transport
    if isinstance(exc, OSError) and exc.errno in CONNECTION_ERRNOS:
        return ErrorClass.transport
    return None


def _classify_message(exc: BaseException) -> Optional[ErrorClass]:
    text = str(exc).lower()
    if not text:
        return None
    for error_class, needles in MESSAGE_PATTERNS:
        if any(n in text for n in needles):
            return error_class
    return None


def classify_error(exc: BaseException) -> ErrorClass:
    """Assign a failure to an ErrorClass. Pure; recomputed on every failure."""
    return _classify_typed(exc) or _classify_message(exc) or ErrorClass.unknown


def is_retryable(exc: BaseException) -> bool:
    return classify_error(exc) not in NON_RETRYABLE


def to_client_error(exc: BaseException) -> BaseException:
    """Translate a raw transport exception into this package's taxonomy.

    Unknown failures are returned unchanged so their original type survives for
    diagnostics.
    """
    if isinstance(exc, QueryClientError):
        return exc
    error_class = classify_error(exc)
    if error_class == ErrorClass.authentication:
        return AuthenticationError()
    if error_class == ErrorClass.rate_limit:
        return RateLimitError("The AI service is receiving too many requests right now.")
    if error_class == ErrorClass.transport:
        return TransportError("Could not reach the AI service.")
    return exc


__all__ = ["NON_RETRYABLE", "classify_error", "is_retryable", "to_client_error"]
