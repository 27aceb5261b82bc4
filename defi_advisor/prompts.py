"""Prompt builders for the four query types (plus the health probe).

Each builder returns an immutable QueryRequest: the system/user message pair
plus the model tier and sampling parameters for that query type. Portfolio
data for free-form questions is summarized first so the prompt stays bounded;
risk analysis embeds the raw data on purpose.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .portfolio.schemas import PortfolioSummary

ANSWER_CHAR_LIMIT = 3500
EXPLAIN_WORD_LIMIT = 400


class QueryKind(str, Enum):
    ask = "ask"
    risk_analysis = "risk_analysis"
    compare = "compare"
    explain = "explain"
    health = "health"


class ModelTier(str, Enum):
    fast = "fast"
    balanced = "balanced"
    smart = "smart"


@dataclass(frozen=True)
class QueryRequest:
    kind: QueryKind
    user_prompt: str
    tier: ModelTier
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    response_format: Optional[Dict[str, Any]] = None
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def prompt_chars(self) -> int:
        return len(self.system_prompt or "") + len(self.user_prompt)


def _dump(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False, default=str)


ADVISOR_SYSTEM = (
    "You are a senior DeFi portfolio advisor with extensive experience in cryptocurrency "
    "markets and decentralized finance protocols. Provide professional, institutional-grade "
    "advice with appropriate financial terminology. Maintain a formal yet accessible tone "
    "suitable for sophisticated investors seeking strategic portfolio guidance."
)

RISK_SYSTEM = "You are a risk assessment expert. Analyze DeFi portfolios and return valid JSON only."

COMPARE_SYSTEM = "You are a DeFi strategy advisor. Compare options clearly and recommend the best fit."

EDUCATOR_SYSTEM = (
    "You are an expert DeFi educator with extensive knowledge of cryptocurrency and "
    "decentralized finance. Explain complex concepts in simple, clear terms that anyone can "
    "understand. Always provide accurate, up-to-date information with appropriate warnings "
    "about risks."
)

RISK_JSON_SHAPE = """{
    "riskScore": 45,
    "riskLevel": "Moderate",
    "riskFactors": ["High concentration in volatile tokens", "Exposure to new protocols", "..."],
    "riskyAssets": [
        {"symbol": "TOKEN", "reason": "High volatility", "value": "$1000"}
    ],
    "lowRiskStrategies": [
        {"name": "Strategy Name", "reason": "Why it's low risk"}
    ],
    "summary": "One paragraph summary"
}"""


def build_ask_request(query: str, summary: PortfolioSummary) -> QueryRequest:
    """Free-form question about the portfolio, answered in four parts."""
    user = f"""As a professional DeFi portfolio advisor, analyze this client inquiry and provide expert guidance:

**Client Query:** "{query}"

**Portfolio Summary (trimmed):** {_dump(summary.to_prompt_payload())}

**Required Response Format:**
1. **Direct Professional Response** to the client's specific question
2. **Portfolio Assessment** with relevant insights and metrics
3. **Strategic Recommendations** with clear rationale
4. **Risk Considerations** where applicable

**Professional Guidelines:**
- Maintain formal, advisory tone throughout
- Provide specific, actionable recommendations
- Include relevant market context when appropriate
- Keep response concise yet comprehensive (under {ANSWER_CHAR_LIMIT} characters)
- Use professional financial terminology appropriately
- Focus on risk-adjusted portfolio optimization

**Response Tone:** Professional financial advisor providing personalized portfolio guidance to a sophisticated investor."""

    return QueryRequest(
        kind=QueryKind.ask,
        system_prompt=ADVISOR_SYSTEM,
        user_prompt=user,
        tier=ModelTier.balanced,
        temperature=0.6,
        max_tokens=1000,
        payload={"query": query},
    )


def build_risk_request(portfolio_data: Any, strategies_data: Any) -> QueryRequest:
    user = f"""
Analyze the risk profile of this DeFi portfolio. Provide:
1. Overall risk score (0-100, where 0 is safest)
2. Top 3 risk factors
3. Top 3 risky assets (if any)
4. Recommended low-risk strategies from the provided list

Portfolio Data:
{_dump(portfolio_data)}

Available Strategies:
{_dump(strategies_data)}

Format your response as JSON with this structure:
{RISK_JSON_SHAPE}"""

    return QueryRequest(
        kind=QueryKind.risk_analysis,
        system_prompt=RISK_SYSTEM,
        user_prompt=user,
        tier=ModelTier.smart,
        temperature=0.3,
        max_tokens=1500,
        response_format={"type": "json_object"},
    )


def build_compare_request(
    strategies: List[Any],
    portfolio_data: Any = None,
    preference: str = "",
) -> QueryRequest:
    total = portfolio_data.get("totalValue") if isinstance(portfolio_data, dict) else None
    total = total or "unknown"
    user = f"""
Compare these DeFi strategies and recommend the best option.

User's Portfolio Value: ${total}
User's Preference: {preference or "balanced risk/reward"}

Strategies to Compare:
{_dump(strategies)}

Provide:
1. Brief comparison highlighting key differences
2. Recommended strategy with clear reasoning
3. Risks to be aware of
4. Expected outcomes

Keep response concise and actionable for Telegram."""

    return QueryRequest(
        kind=QueryKind.compare,
        system_prompt=COMPARE_SYSTEM,
        user_prompt=user,
        tier=ModelTier.balanced,
        temperature=0.6,
        max_tokens=1500,
        payload={"preference": preference},
    )


def build_explain_request(concept: str, context: str = "") -> QueryRequest:
    lines = [f'Explain "{concept}" in simple terms for someone new to DeFi.', ""]
    if context:
        lines += [f"Context: {context}", ""]
    lines += [
        "Requirements:",
        "- Use simple language and clear explanations",
        "- Provide practical real-world analogies where helpful",
        "- Mention important risks and considerations",
        "- Include actionable insights when relevant",
        f"- Keep it concise but comprehensive (under {EXPLAIN_WORD_LIMIT} words)",
        "- Format for Telegram (simple text, bullet points OK)",
        "- Be professional yet accessible",
    ]
    return QueryRequest(
        kind=QueryKind.explain,
        system_prompt=EDUCATOR_SYSTEM,
        user_prompt="\n".join(lines),
        tier=ModelTier.balanced,
        temperature=0.6,
        max_tokens=1000,
        payload={"concept": concept},
    )


def build_health_request() -> QueryRequest:
    return QueryRequest(
        kind=QueryKind.health,
        user_prompt="Hello",
        tier=ModelTier.fast,
        max_tokens=10,
    )


__all__ = [
    "ModelTier",
    "QueryKind",
    "QueryRequest",
    "build_ask_request",
    "build_compare_request",
    "build_explain_request",
    "build_health_request",
    "build_risk_request",
]
