from __future__ import annotations

import asyncio
import json

import pytest

import defi_advisor.client as client_module
from defi_advisor.client import ASK_FAILED, COMPARE_EMPTY, RISK_FAILED, QueryClient
from defi_advisor.config import LLMConfig, ModelTiers
from defi_advisor.llm.errors import (
    AuthenticationError,
    ConfigurationError,
    ExhaustedRetriesError,
    ParseError,
    TransportError,
)
from defi_advisor.llm.transport import OpenAICompatibleTransport
from defi_advisor.risk.schemas import RiskAnalysisResult

RISK_JSON = json.dumps(
    {
        "riskScore": 45,
        "riskLevel": "Moderate",
        "riskFactors": ["Concentration"],
        "riskyAssets": [{"symbol": "C", "reason": "Volatile", "value": "$200"}],
        "lowRiskStrategies": [{"name": "Stable LP", "reason": "Pegged assets"}],
        "summary": "Concentrated in one token.",
    }
)


@pytest.mark.parametrize("bad_key", [None, "", "short", "123456789", 12345678901, ["gsk_0123456789"]])
def test_invalid_api_key_rejected_before_any_call(bad_key, fake_transport) -> None:
    with pytest.raises(ConfigurationError):
        QueryClient(bad_key, transport=fake_transport)
    assert fake_transport.calls == []


def test_default_transport_is_built_from_config(api_key) -> None:
    client = QueryClient(api_key, config=LLMConfig(base_url="https://example.invalid/v1", timeout_s=5))
    assert client.is_ready
    assert isinstance(client.transport, OpenAICompatibleTransport)
    asyncio.run(client.aclose())


def test_ask_returns_text_and_uses_balanced_tier(make_client, sample_portfolio) -> None:
    client = make_client("  Your largest position is C.  ")
    answer = asyncio.run(client.ask("What is my biggest holding?", sample_portfolio))
    assert answer == "Your largest position is C."

    call = client.transport.calls[0]
    assert call["model"] == ModelTiers().balanced
    assert call["response_format"] is None
    assert '"What is my biggest holding?"' in call["user_prompt"]
    assert '"totalValueUSD": 250.005' in call["user_prompt"]


def test_ask_retries_transport_failures(make_client, sleeper, sample_portfolio) -> None:
    client = make_client(TransportError("down"), TransportError("down"), "finally")
    assert asyncio.run(client.ask("q", sample_portfolio)) == "finally"
    assert len(client.transport.calls) == 3
    assert sleeper.delays == [2.0, 4.0]


def test_ask_retries_empty_responses_then_gives_up(make_client, sleeper, sample_portfolio) -> None:
    client = make_client("", "   ", "")
    with pytest.raises(ExhaustedRetriesError) as excinfo:
        asyncio.run(client.ask("q", sample_portfolio))
    assert excinfo.value.message == ASK_FAILED
    assert len(client.transport.calls) == 3


def test_ask_auth_failure_single_attempt(make_client, sleeper, sample_portfolio) -> None:
    client = make_client(RuntimeError("Error code: 401 - invalid api key"))
    with pytest.raises(AuthenticationError):
        asyncio.run(client.ask("q", sample_portfolio))
    assert len(client.transport.calls) == 1
    assert sleeper.delays == []


def test_analyze_risk_parses_structured_output(make_client, sample_portfolio) -> None:
    client = make_client(RISK_JSON)
    result = asyncio.run(client.analyze_risk(sample_portfolio, [{"name": "Stable LP"}]))
    assert isinstance(result, RiskAnalysisResult)
    assert result.riskScore == 45
    assert result.riskyAssets[0].symbol == "C"

    call = client.transport.calls[0]
    assert call["model"] == ModelTiers().smart
    assert call["temperature"] == 0.3
    assert call["response_format"] == {"type": "json_object"}


@pytest.mark.parametrize("reply", ["I think your risk is moderate.", "", '{"riskLevel": "Low"}'])
def test_analyze_risk_rejects_unparseable_output(make_client, sample_portfolio, reply) -> None:
    client = make_client(reply)
    with pytest.raises(ParseError) as excinfo:
        asyncio.run(client.analyze_risk(sample_portfolio, []))
    assert excinfo.value.message == RISK_FAILED
    assert isinstance(excinfo.value.__cause__, ParseError)


def test_analyze_risk_is_single_attempt(make_client, sleeper, sample_portfolio) -> None:
    client = make_client(TransportError("down"), RISK_JSON)
    with pytest.raises(ExhaustedRetriesError) as excinfo:
        asyncio.run(client.analyze_risk(sample_portfolio, []))
    assert excinfo.value.message == RISK_FAILED
    assert len(client.transport.calls) == 1
    assert sleeper.delays == []


def test_compare_strategies(make_client) -> None:
    client = make_client("Pick strategy B.")
    out = asyncio.run(client.compare_strategies([{"name": "A"}, {"name": "B"}], {"totalValue": 900}, "low risk"))
    assert out == "Pick strategy B."
    assert "User's Preference: low risk" in client.transport.calls[0]["user_prompt"]


def test_compare_strategies_accepts_list_portfolio(make_client) -> None:
    client = make_client("Pick strategy A.")
    out = asyncio.run(client.compare_strategies([{"name": "A"}], [{"totalValue": 1}], ""))
    assert out == "Pick strategy A."
    assert "User's Portfolio Value: $unknown" in client.transport.calls[0]["user_prompt"]


def test_compare_strategies_empty_reply(make_client) -> None:
    client = make_client("")
    assert asyncio.run(client.compare_strategies([{"name": "A"}])) == COMPARE_EMPTY


def test_compare_strategies_is_single_attempt(make_client) -> None:
    client = make_client(RuntimeError("rate limit exceeded"), "unused")
    with pytest.raises(ExhaustedRetriesError):
        asyncio.run(client.compare_strategies([{"name": "A"}]))
    assert len(client.transport.calls) == 1


def test_explain_concept_uses_longer_backoff(make_client, sleeper) -> None:
    client = make_client(TransportError("down"), RuntimeError("weird"), "APY is annual yield.")
    out = asyncio.run(client.explain_concept("APY", "staking rewards"))
    assert out == "APY is annual yield."
    assert sleeper.delays == [3.0, 4.0]
    assert "Context: staking rewards" in client.transport.calls[0]["user_prompt"]


def test_explain_concept_exhausted_message_names_concept(make_client) -> None:
    client = make_client(TransportError("down"))
    with pytest.raises(ExhaustedRetriesError) as excinfo:
        asyncio.run(client.explain_concept("liquid staking"))
    assert '"liquid staking"' in excinfo.value.message
    assert len(client.transport.calls) == 3


def test_health_check_true_on_content(make_client) -> None:
    client = make_client("Hi!")
    assert asyncio.run(client.health_check()) is True
    call = client.transport.calls[0]
    assert call["model"] == ModelTiers().fast
    assert call["system_prompt"] is None
    assert call["max_tokens"] == 10


@pytest.mark.parametrize(
    "outcome",
    [TransportError("unreachable"), ConnectionRefusedError(), RuntimeError("401"), ""],
)
def test_health_check_false_never_raises(make_client, outcome) -> None:
    client = make_client(outcome)
    assert asyncio.run(client.health_check()) is False
    assert len(client.transport.calls) == 1


def test_uninitialized_transport_fails_fast(monkeypatch, api_key, sample_portfolio) -> None:
    def _broken(*args, **kwargs):
        raise RuntimeError("cannot build client")

    monkeypatch.setattr(client_module, "OpenAICompatibleTransport", _broken)
    client = QueryClient(api_key)
    assert not client.is_ready

    with pytest.raises(ConfigurationError):
        asyncio.run(client.ask("q", sample_portfolio))
    with pytest.raises(ConfigurationError):
        asyncio.run(client.analyze_risk(sample_portfolio, []))
    with pytest.raises(ConfigurationError):
        asyncio.run(client.compare_strategies([]))
    with pytest.raises(ConfigurationError) as excinfo:
        asyncio.run(client.explain_concept("APR"))
    assert "explanation service" in excinfo.value.message
    assert asyncio.run(client.health_check()) is False


def test_concurrent_queries_are_independent(make_client, sample_portfolio) -> None:
    client = make_client("answer")

    async def _both():
        return await asyncio.gather(
            client.ask("first", sample_portfolio),
            client.explain_concept("TVL"),
        )

    assert asyncio.run(_both()) == ["answer", "answer"]
    assert len(client.transport.calls) == 2
