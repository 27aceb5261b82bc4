"""Portfolio summarizer.

Compresses an arbitrarily large snapshot into a bounded digest so prompts stay
within the completion service's budget. Deterministic and never raises: any
failure yields the minimal `summary_failed` digest instead.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List

from loguru import logger

from .schemas import PortfolioSnapshot, PortfolioSummary, TopToken, coerce_usd

MAX_TOP_TOKENS = 30
DUST_THRESHOLD_USD = Decimal("0.01")


class SummarizationError(Exception):
    """Internal to the summarizer; always resolved to the fallback digest."""


def build_summary(snapshot: PortfolioSnapshot) -> PortfolioSummary:
    total = Decimal("0")
    networks: List[str] = []
    candidates: List[TopToken] = []

    for holding in snapshot.holdings:
        if holding.network_name not in networks:
            networks.append(holding.network_name)
        for token in holding.tokens:
            total += token.usd_value
            if token.usd_value > DUST_THRESHOLD_USD:
                candidates.append(
                    TopToken(
                        symbol=token.symbol,
                        network=holding.network_name,
                        usd_value=token.usd_value,
                    )
                )

    # sorted() is stable, so equal values keep input order.
    ranked = sorted(candidates, key=lambda t: t.usd_value, reverse=True)

    return PortfolioSummary(
        total_value_usd=total,
        networks=tuple(networks),
        top_tokens=tuple(ranked[:MAX_TOP_TOKENS]),
    )


def summarize_portfolio(raw: Any) -> PortfolioSummary:
    """Summarize a raw provider payload (or an already-parsed snapshot)."""
    try:
        if isinstance(raw, PortfolioSnapshot):
            snapshot = raw
        elif isinstance(raw, dict):
            snapshot = PortfolioSnapshot.from_raw(raw)
        else:
            raise SummarizationError(f"unsupported portfolio payload: {type(raw).__name__}")
        return build_summary(snapshot)
    except Exception as e:
        logger.warning(f"Failed to summarize portfolio, using minimal fields: {e}")
        return fallback_summary(raw)


def fallback_summary(raw: Any) -> PortfolioSummary:
    total: Any = 0
    if isinstance(raw, dict):
        total = raw.get("totalValue") or 0
    return PortfolioSummary(total_value_usd=coerce_usd(total), note="summary_failed")


__all__ = [
    "DUST_THRESHOLD_USD",
    "MAX_TOP_TOKENS",
    "SummarizationError",
    "build_summary",
    "fallback_summary",
    "summarize_portfolio",
]
