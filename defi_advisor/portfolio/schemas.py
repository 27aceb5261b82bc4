"""Pydantic contracts for portfolio data.

`PortfolioSnapshot` is the tolerant view of what the portfolio provider sends
(networks x token balances). `PortfolioSummary` is the bounded, immutable
digest that gets embedded into prompts.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def coerce_usd(value: Any) -> Decimal:
    """Best-effort USD amount: absent, non-numeric or negative values become 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, float) and not math.isfinite(value):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not amount.is_finite() or amount < 0:
        return Decimal("0")
    return amount


class TokenBalance(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    symbol: str = Field("Unknown", description="Token ticker (falls back to name).")
    usd_value: Decimal = Field(
        Decimal("0"),
        validation_alias=AliasChoices("balanceUSD", "usdValue", "usd_value"),
        description="USD value of the balance; never negative.",
    )

    @field_validator("usd_value", mode="before")
    @classmethod
    def _coerce_usd(cls, v: Any) -> Decimal:
        return coerce_usd(v)

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "TokenBalance":
        data = dict(raw)
        data["symbol"] = str(raw.get("symbol") or raw.get("name") or "Unknown")
        return cls.model_validate(data)


class NetworkHolding(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    network_name: str = "Unknown"
    tokens: Tuple[TokenBalance, ...] = ()

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "NetworkHolding":
        network = raw.get("network")
        if isinstance(network, dict):
            name = network.get("name") or "Unknown"
        else:
            name = network or "Unknown"
        tokens = raw.get("tokens")
        if not isinstance(tokens, list):
            tokens = []
        return cls(
            network_name=str(name),
            tokens=tuple(TokenBalance.from_raw(t) for t in tokens),
        )


class PortfolioSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    holdings: Tuple[NetworkHolding, ...] = ()

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "PortfolioSnapshot":
        """Parse the provider payload (`{"portfolio": [...]}`).

        A missing or non-list `portfolio` is an empty snapshot; entries that are
        not objects raise (the summarizer turns that into its fallback).
        """
        nets = raw.get("portfolio")
        if not isinstance(nets, list):
            nets = []
        return cls(holdings=tuple(NetworkHolding.from_raw(n) for n in nets))


class TopToken(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    symbol: str
    network: str
    usd_value: Decimal


class PortfolioSummary(BaseModel):
    """Bounded digest of a snapshot; `note` is set only on the fallback path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    total_value_usd: Decimal = Decimal("0")
    networks: Tuple[str, ...] = ()
    top_tokens: Tuple[TopToken, ...] = ()
    note: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.note is not None

    def to_prompt_payload(self) -> Dict[str, Any]:
        """JSON-friendly dict in the camelCase shape the prompts use."""
        if self.note is not None:
            return {"note": self.note, "totalValueUSD": float(self.total_value_usd)}
        top: List[Dict[str, Any]] = [
            {"symbol": t.symbol, "network": t.network, "usd": float(t.usd_value)}
            for t in self.top_tokens
        ]
        return {
            "totalValueUSD": float(self.total_value_usd),
            "networks": list(self.networks),
            "topTokens": top,
        }


__all__ = [
    "NetworkHolding",
    "PortfolioSnapshot",
    "PortfolioSummary",
    "TokenBalance",
    "TopToken",
    "coerce_usd",
]
