"""Query client facade.

Composes summarizer -> prompt builder -> retry orchestrator -> transport ->
response validator into the four user-facing operations plus a health check.

One instance owns one transport handle for its lifetime. Concurrent queries
share only that handle and the immutable config; per-call state (summary,
retry state) lives inside each call.

Retry asymmetry: `ask` and `explain_concept` retry (3 attempts, exponential
backoff); `analyze_risk` and `compare_strategies` make a single attempt.
This split is kept as inherited; whether it was intended is still unresolved.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger

from .config import LLMConfig
from .llm.classifier import classify_error
from .llm.errors import ConfigurationError, EmptyResponseError, ErrorClass, ParseError
from .llm.retry import ASK_POLICY, EXPLAIN_POLICY, SINGLE_ATTEMPT, RetryOrchestrator
from .llm.transport import CompletionTransport, OpenAICompatibleTransport
from .llm.validator import parse_structured, require_text
from .portfolio.summarizer import summarize_portfolio
from .prompts import (
    QueryRequest,
    build_ask_request,
    build_compare_request,
    build_explain_request,
    build_health_request,
    build_risk_request,
)
from .risk.schemas import RiskAnalysisResult

MIN_API_KEY_LENGTH = 10

ANALYSIS_UNAVAILABLE = (
    "AI analysis service is currently unavailable. "
    "Please ensure GROQ_API_KEY is configured properly."
)
EXPLANATION_UNAVAILABLE = "AI explanation service is currently unavailable. Please try again later."
ASK_FAILED = (
    "Unable to analyze your portfolio query at this time. "
    "Please check your connection and try again later."
)
RISK_FAILED = "Unable to perform risk analysis. Please try again."
COMPARE_FAILED = "Unable to compare strategies. Please try again."
COMPARE_EMPTY = "Unable to compare strategies."

_HEALTH_SUGGESTIONS = {
    ErrorClass.authentication: "Check GROQ_API_KEY in the environment",
    ErrorClass.transport: "Network connectivity issue - check outbound network access",
}


def validate_api_key(api_key: Any) -> str:
    if not api_key:
        raise ConfigurationError("GROQ_API_KEY is required")
    if not isinstance(api_key, str):
        raise ConfigurationError("GROQ_API_KEY must be a string")
    if len(api_key) < MIN_API_KEY_LENGTH:
        raise ConfigurationError("GROQ_API_KEY appears to be invalid (too short)")
    return api_key


class QueryClient:
    """Resilient client for portfolio questions against the completion service."""

    def __init__(
        self,
        api_key: Any,
        *,
        config: Optional[LLMConfig] = None,
        transport: Optional[CompletionTransport] = None,
        orchestrator: Optional[RetryOrchestrator] = None,
    ):
        key = validate_api_key(api_key)
        self.config = config or LLMConfig()
        self.orchestrator = orchestrator or RetryOrchestrator()

        logger.info(
            f"API key validation: key_length={len(key)} key_preview={key[:8]}..."
        )

        self.transport: Optional[CompletionTransport]
        if transport is not None:
            self.transport = transport
        else:
            try:
                self.transport = OpenAICompatibleTransport(key, self.config)
                logger.info(
                    f"Completion client initialized: base_url={self.config.base_url} "
                    f"timeout={self.config.timeout_s}s"
                )
            except Exception as e:
                logger.error(f"Completion client initialization failed: {e}")
                self.transport = None

    @property
    def is_ready(self) -> bool:
        return self.transport is not None

    def _ensure_ready(self, message: str) -> CompletionTransport:
        if self.transport is None:
            logger.warning("Completion client not initialized")
            raise ConfigurationError(message)
        return self.transport

    async def _send(self, transport: CompletionTransport, request: QueryRequest) -> str:
        model = self.config.models.for_tier(request.tier)
        logger.info(
            f"Completion request: kind={request.kind.value} tier={request.tier.value} "
            f"model={model} prompt_chars={request.prompt_chars}"
        )
        return await transport.complete(
            system_prompt=request.system_prompt,
            user_prompt=request.user_prompt,
            model=model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            response_format=request.response_format,
        )

    async def ask(self, query: str, portfolio_data: Dict[str, Any]) -> str:
        """Answer a natural-language question about the portfolio."""
        transport = self._ensure_ready(ANALYSIS_UNAVAILABLE)
        summary = summarize_portfolio(portfolio_data)
        request = build_ask_request(query, summary)

        async def _call() -> str:
            return require_text(await self._send(transport, request))

        result = await self.orchestrator.execute(
            _call, policy=ASK_POLICY, operation="ask", failure_message=ASK_FAILED
        )
        user_id = portfolio_data.get("userId") if isinstance(portfolio_data, dict) else None
        logger.info(
            f"Natural language query processed: user_id={user_id} response_length={len(result)}"
        )
        return result

    async def analyze_risk(self, portfolio_data: Any, strategies_data: Any) -> RiskAnalysisResult:
        """Structured risk assessment. Single attempt; bad JSON raises ParseError."""
        transport = self._ensure_ready(ANALYSIS_UNAVAILABLE)
        request = build_risk_request(portfolio_data, strategies_data)

        text = await self.orchestrator.execute(
            lambda: self._send(transport, request),
            policy=SINGLE_ATTEMPT,
            operation="risk_analysis",
            failure_message=RISK_FAILED,
        )
        try:
            result = parse_structured(text, RiskAnalysisResult)
        except ParseError as e:
            logger.error(f"Risk analysis failed: {e.message}")
            raise ParseError(RISK_FAILED, raw_text=e.raw_text) from e

        logger.info(
            f"Risk analysis completed: risk_score={result.riskScore} risk_level={result.riskLevel}"
        )
        return result

    async def compare_strategies(
        self,
        strategies: List[Any],
        portfolio_data: Any = None,
        preference: str = "",
    ) -> str:
        """Compare strategies and recommend one. Single attempt."""
        transport = self._ensure_ready(ANALYSIS_UNAVAILABLE)
        request = build_compare_request(strategies, portfolio_data, preference)

        text = await self.orchestrator.execute(
            lambda: self._send(transport, request),
            policy=SINGLE_ATTEMPT,
            operation="compare",
            failure_message=COMPARE_FAILED,
        )
        if not text.strip():
            logger.warning("Strategy comparison returned empty content")
            return COMPARE_EMPTY
        return text

    async def explain_concept(self, concept: str, context: str = "") -> str:
        """Plain-language explanation of a DeFi concept."""
        transport = self._ensure_ready(EXPLANATION_UNAVAILABLE)
        request = build_explain_request(concept, context)

        async def _call() -> str:
            return require_text(await self._send(transport, request))

        result = await self.orchestrator.execute(
            _call,
            policy=EXPLAIN_POLICY,
            operation="explain",
            failure_message=(
                f'Unable to explain "{concept}" at this time. '
                "Please check your connection and try again later."
            ),
        )
        logger.info(f"Concept explanation completed: concept={concept} response_length={len(result)}")
        return result

    async def health_check(self) -> bool:
        """Cheap probe; True iff the service returned non-empty content. Never raises."""
        if self.transport is None:
            logger.error("Health check failed: client not initialized")
            return False
        try:
            text = await self._send(self.transport, build_health_request())
            require_text(text)
        except EmptyResponseError:
            logger.warning("Health check completed: empty response")
            return False
        except Exception as e:
            suggestion = _HEALTH_SUGGESTIONS.get(
                classify_error(e), "Unknown error - check the AI service status"
            )
            logger.error(
                f"Health check failed: exc={type(e).__name__} error={e} suggestion={suggestion}"
            )
            return False
        logger.info(f"Health check completed: healthy=True model={self.config.models.fast}")
        return True

    async def aclose(self) -> None:
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "QueryClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = ["QueryClient", "validate_api_key"]
