"""Central configuration loader.

Read env vars once, expose typed config objects and defaults.
The query client itself never touches the environment: the entrypoint calls
`load_config()` and hands the pieces over explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"


def _env_str(name: str, default: str) -> str:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return default
    return val.strip()


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return default
    return int(val)


def _env_float(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return default
    return float(val)


@dataclass(frozen=True)
class ModelTiers:
    fast: str = "llama-3.1-8b-instant"
    balanced: str = "llama-3.3-70b-versatile"
    smart: str = "llama-3.3-70b-versatile"

    def for_tier(self, tier: str) -> str:
        """Resolve a tier name ("fast" / "balanced" / "smart") to a model id."""
        key = getattr(tier, "value", tier)
        if key not in {"fast", "balanced", "smart"}:
            raise ValueError(f"Unknown model tier: {tier!r}")
        return getattr(self, key)


@dataclass(frozen=True)
class LLMConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = 30.0
    models: ModelTiers = field(default_factory=ModelTiers)


@dataclass(frozen=True)
class LogConfig:
    level: str = "INFO"
    file_path: Optional[str] = None
    rotation: str = "1 MB"
    retention: int = 3


@dataclass(frozen=True)
class AppConfig:
    api_key: Optional[str]
    llm: LLMConfig
    logging: LogConfig


def load_config() -> AppConfig:
    """Load configuration from environment."""
    defaults = ModelTiers()
    models = ModelTiers(
        fast=_env_str("LLM_MODEL_FAST", defaults.fast),
        balanced=_env_str("LLM_MODEL_BALANCED", defaults.balanced),
        smart=_env_str("LLM_MODEL_SMART", defaults.smart),
    )

    llm = LLMConfig(
        base_url=_env_str("LLM_BASE_URL", DEFAULT_BASE_URL),
        timeout_s=_env_float("LLM_TIMEOUT_S", 30.0),
        models=models,
    )

    logging = LogConfig(
        level=_env_str("LOG_LEVEL", "INFO").upper(),
        file_path=os.getenv("LOG_FILE") or None,
        rotation=_env_str("LOG_ROTATION", "1 MB"),
        retention=_env_int("LOG_RETENTION", 3),
    )

    api_key = os.getenv("GROQ_API_KEY") or os.getenv("LLM_API_KEY")

    return AppConfig(api_key=api_key, llm=llm, logging=logging)


__all__ = ["AppConfig", "LLMConfig", "LogConfig", "ModelTiers", "load_config"]
