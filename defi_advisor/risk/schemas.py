"""Pydantic contracts for risk analysis output.

The completion service is asked for strict JSON; these models are the explicit
schema check applied after parsing. Field names keep the camelCase keys the
prompt asks for.
"""

from __future__ import annotations

from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


class RiskyAsset(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: str = Field(..., min_length=1)
    reason: str = Field("", description="Why this asset is considered risky.")
    value: Union[str, float, None] = Field(
        None, description='Position value as reported by the model, e.g. "$1000".'
    )


class LowRiskStrategy(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    reason: str = ""


class RiskAnalysisResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    riskScore: int = Field(..., ge=0, le=100, description="0 is safest, 100 riskiest.")
    riskLevel: str = Field(..., min_length=1, description="e.g. Low / Moderate / High.")
    riskFactors: List[str] = Field(default_factory=list)
    riskyAssets: List[RiskyAsset] = Field(default_factory=list)
    lowRiskStrategies: List[LowRiskStrategy] = Field(default_factory=list)
    summary: str = Field(..., description="One paragraph summary.")


T = TypeVar("T", bound=BaseModel)


def export_json_schema(model: Type[T]) -> Dict[str, Any]:
    """Export JSON schema for structured output hints."""
    return model.model_json_schema()


__all__ = ["LowRiskStrategy", "RiskAnalysisResult", "RiskyAsset", "export_json_schema"]
