"""Completion transport.

Thin async wrapper over an OpenAI-compatible chat completions endpoint (Groq by
default, OpenRouter works the same way via `base_url`). It owns request shaping
only: retries are disabled in the SDK and handled by RetryOrchestrator, and
SDK exceptions are translated into this package's error taxonomy.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import openai
from openai import AsyncOpenAI

from ..config import LLMConfig
from .classifier import to_client_error

Message = Dict[str, Any]


class CompletionTransport(Protocol):
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
        ...


def build_messages(system_prompt: Optional[str], user_prompt: str) -> List[Message]:
    messages: List[Message] = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": user_prompt})
    return messages


class OpenAICompatibleTransport:
    """Single logical operation: `complete(...) -> text` (empty string if no content)."""

    def __init__(self, api_key: str, config: Optional[LLMConfig] = None):
        cfg = config or LLMConfig()
        self.config = cfg
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=cfg.base_url,
            timeout=cfg.timeout_s,
            max_retries=0,
        )

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
        params: Dict[str, Any] = {}
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        if response_format is not None:
            params["response_format"] = response_format

        try:
            res = await self.client.chat.completions.create(
                model=model,
                messages=build_messages(system_prompt, user_prompt),
                **params,
            )
        except openai.APIError as e:
            translated = to_client_error(e)
            if translated is e:
                raise
            raise translated from e

        if not res.choices:
            return ""
        return res.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()


__all__ = ["CompletionTransport", "OpenAICompatibleTransport", "build_messages"]
