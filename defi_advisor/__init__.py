"""Conversational DeFi portfolio assistant: resilient LLM query client.

Keep this package `__init__` lightweight; the facade and error types are
re-exported for convenience.
"""

from .client import QueryClient  # noqa: F401
from .llm.errors import (  # noqa: F401
    AuthenticationError,
    ConfigurationError,
    ExhaustedRetriesError,
    ParseError,
    QueryClientError,
)

__version__ = "0.1.0"
