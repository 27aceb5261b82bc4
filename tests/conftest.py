from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

import pytest

from defi_advisor.client import QueryClient
from defi_advisor.llm.retry import RetryOrchestrator

API_KEY = "gsk_test_0123456789abcdef"

Outcome = Union[str, BaseException]


class FakeTransport:
    """Replays scripted outcomes (text or exception) and records every call."""

    def __init__(self, outcomes: Sequence[Outcome] = ("ok",)):
        self.outcomes: List[Outcome] = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    async def complete(
        self,
        *,
        system_prompt: Optional[str],
        user_prompt: str,
        model: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "model": model,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "response_format": response_format,
            }
        )
        idx = min(len(self.calls), len(self.outcomes)) - 1
        outcome = self.outcomes[idx]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def api_key() -> str:
    return API_KEY


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_client(sleeper: RecordingSleep):
    def _make(*outcomes: Outcome) -> QueryClient:
        transport = FakeTransport(outcomes or ("ok",))
        return QueryClient(
            API_KEY,
            transport=transport,
            orchestrator=RetryOrchestrator(sleep=sleeper),
        )

    return _make


@pytest.fixture
def sample_portfolio() -> Dict[str, Any]:
    return {
        "userId": "u-42",
        "totalValue": 250.005,
        "portfolio": [
            {
                "network": {"name": "Ethereum"},
                "tokens": [
                    {"symbol": "A", "balanceUSD": 50},
                    {"symbol": "B", "balanceUSD": 0.005},
                    {"symbol": "C", "balanceUSD": 200},
                ],
            }
        ],
    }
