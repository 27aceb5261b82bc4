"""Structured risk-analysis contracts."""

from .schemas import (  # noqa: F401
    LowRiskStrategy,
    RiskAnalysisResult,
    RiskyAsset,
    export_json_schema,
)
