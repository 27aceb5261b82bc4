"""Retry orchestration for completion calls.

One call = Pending -> Attempting -> {Success | Retrying | Failed}:
- success returns immediately;
- Authentication/Configuration failures go straight to Failed;
- anything else sleeps `base * 2**(attempt-1)` and tries again while attempts
  remain (Transport failures use the longer base);
- Failed raises AuthenticationError / ConfigurationError or
  ExhaustedRetriesError wrapping the last underlying error.

Built on tenacity; the sleep coroutine is injectable so tests can observe the
backoff schedule without waiting.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
)

from .classifier import classify_error, is_retryable
from .errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorClass,
    ExhaustedRetriesError,
    QueryClientError,
)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_FAILURE_MESSAGE = "The AI service is unavailable right now. Please try again later."


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay_s: float = 1.0
    transport_base_delay_s: float = 2.0

    def delay_for(self, error_class: ErrorClass, attempt: int) -> float:
        """Backoff before attempt `attempt + 1`, given attempt `attempt` failed."""
        base = self.transport_base_delay_s if error_class == ErrorClass.transport else self.base_delay_s
        return base * (2 ** (attempt - 1))


ASK_POLICY = RetryPolicy(max_attempts=3, base_delay_s=1.0, transport_base_delay_s=2.0)
EXPLAIN_POLICY = RetryPolicy(max_attempts=3, base_delay_s=2.0, transport_base_delay_s=3.0)
SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)


class RetryOrchestrator:
    """Runs a completion coroutine under a bounded, classified backoff policy."""

    def __init__(self, sleep: Optional[SleepFn] = None):
        self._sleep: SleepFn = sleep or asyncio.sleep

    async def execute(
        self,
        request_fn: Callable[[], Awaitable[T]],
        *,
        policy: RetryPolicy = ASK_POLICY,
        operation: str = "query",
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> T:
        if policy.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        def _wait(retry_state: RetryCallState) -> float:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            error_class = classify_error(exc) if exc is not None else ErrorClass.unknown
            return policy.delay_for(error_class, retry_state.attempt_number)

        def _before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            error_class = classify_error(exc) if exc is not None else ErrorClass.unknown
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.info(
                f"Retrying {operation}: attempt={retry_state.attempt_number + 1}/{policy.max_attempts} "
                f"delay={delay:.1f}s error_type={error_class.value}"
            )

        def _after(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            if exc is None:
                return
            logger.error(
                f"{operation} attempt {retry_state.attempt_number}/{policy.max_attempts} failed: "
                f"error_type={classify_error(exc).value} exc={type(exc).__name__} error={exc}"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=_wait,
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            before_sleep=_before_sleep,
            after=_after,
            reraise=False,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    logger.info(
                        f"{operation} attempt {attempt.retry_state.attempt_number}/{policy.max_attempts}"
                    )
                    return await request_fn()
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                f"All {operation} attempts failed: attempts={e.last_attempt.attempt_number} "
                f"error={last_error}"
            )
            raise ExhaustedRetriesError(
                failure_message,
                attempts=e.last_attempt.attempt_number,
                last_error=last_error,
            ) from last_error
        except Exception as e:
            # Only non-retryable classes escape tenacity un-wrapped.
            error_class = classify_error(e)
            if error_class == ErrorClass.authentication:
                logger.error(
                    f"Authentication error during {operation} - check GROQ_API_KEY: {e}"
                )
                if isinstance(e, AuthenticationError):
                    raise
                raise AuthenticationError() from e
            if error_class == ErrorClass.configuration and not isinstance(e, QueryClientError):
                raise ConfigurationError(failure_message) from e
            raise
        raise AssertionError("unreachable: tenacity yielded no attempts")


__all__ = [
    "ASK_POLICY",
    "EXPLAIN_POLICY",
    "SINGLE_ATTEMPT",
    "RetryOrchestrator",
    "RetryPolicy",
]
