from __future__ import annotations

import json

from defi_advisor.risk.schemas import RiskAnalysisResult, RiskyAsset, export_json_schema


def test_risk_result_round_trips_to_json() -> None:
    result = RiskAnalysisResult(
        riskScore=72,
        riskLevel="High",
        riskFactors=["Leverage", "New protocols"],
        riskyAssets=[RiskyAsset(symbol="XYZ", reason="Thin liquidity", value=1250.0)],
        summary="Aggressive allocation.",
    )
    dumped = result.model_dump(mode="json")
    assert dumped["riskyAssets"][0]["value"] == 1250.0
    assert dumped["lowRiskStrategies"] == []
    json.dumps(dumped)


def test_export_json_schema() -> None:
    schema = export_json_schema(RiskAnalysisResult)
    assert schema.get("title") == "RiskAnalysisResult"
    assert {"riskScore", "riskLevel", "summary"} <= set(schema["required"])
    assert schema["properties"]["riskScore"]["maximum"] == 100
