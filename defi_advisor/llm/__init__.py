"""Completion-service plumbing: transport, failure classification, retries, validation.

Keep this package `__init__` lightweight; import concrete modules directly, e.g.:
  - `from defi_advisor.llm.retry import RetryOrchestrator`
"""

from .errors import (  # noqa: F401
    AuthenticationError,
    ConfigurationError,
    EmptyResponseError,
    ErrorClass,
    ExhaustedRetriesError,
    ParseError,
    QueryClientError,
    RateLimitError,
    TransportError,
)
