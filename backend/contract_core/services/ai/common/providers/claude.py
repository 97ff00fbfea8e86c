"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any

import httpx

from .base import BaseProvider, ProviderResult

MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
JSON_PREFILL = "{"


class ClaudeProvider(BaseProvider):
    name = "claude"
    default_model = "claude-3-5-haiku-20241022"

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(transport=transport)
        self._api_key = api_key

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        model: str = "",
        temperature: float = 0.0,
        max_tokens: int = 1024,
        timeout_seconds: float = 30.0,
        json_mode: bool = False,
    ) -> ProviderResult:
        model = model or self.default_model
        messages = [{"role": "user", "content": prompt}]
        if json_mode:
            # Prefilled assistant turn: the reply continues an open JSON object.
            messages.append({"role": "assistant", "content": JSON_PREFILL})
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system_prompt:
            payload["system"] = system_prompt

        data, latency_ms = await self._post_json(
            MESSAGES_URL,
            headers={"x-api-key": self._api_key, "anthropic-version": ANTHROPIC_VERSION},
            payload=payload,
            timeout_seconds=timeout_seconds,
        )
        text = "".join(block.get("text", "") for block in data.get("content", []))
        if json_mode:
            text = JSON_PREFILL + text
        usage = data.get("usage") or {}
        return ProviderResult(
            raw_text=text,
            model=model,
            provider=self.name,
            prompt_tokens=usage.get("input_tokens", 0),
            completion_tokens=usage.get("output_tokens", 0),
            latency_ms=latency_ms,
        )
