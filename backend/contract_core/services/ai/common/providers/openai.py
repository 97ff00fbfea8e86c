"""OpenAI chat completions provider."""

from __future__ import annotations

from typing import Any

import httpx

from .base import BaseProvider, ProviderResult


class OpenAIProvider(BaseProvider):
    name = "openai"
    endpoint = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-4o-mini"

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None) -> None:
        super().__init__(transport=transport)
        self._api_key = api_key

    def _payload(
        self,
        prompt: str,
        system_prompt: str | None,
        model: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> dict[str, Any]:
        messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
        messages.append({"role": "user", "content": prompt})
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}
        return payload

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
        data, latency_ms = await self._post_json(
            self.endpoint,
            headers={"Authorization": f"Bearer {self._api_key}"},
            payload=self._payload(prompt, system_prompt, model, temperature, max_tokens, json_mode),
            timeout_seconds=timeout_seconds,
        )
        usage = data.get("usage") or {}
        return ProviderResult(
            raw_text=data["choices"][0]["message"]["content"] or "",
            model=model,
            provider=self.name,
            prompt_tokens=usage.get("prompt_tokens", 0),
            completion_tokens=usage.get("completion_tokens", 0),
            latency_ms=latency_ms,
        )
