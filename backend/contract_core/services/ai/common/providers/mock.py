"""Mock provider: deterministic responses for tests and local runs."""

from __future__ import annotations

import time

from .base import BaseProvider, ProviderResult


class MockProvider(BaseProvider):
    name = "mock"

    def __init__(self, response_text: str = "{}") -> None:
        super().__init__()
        self.response_text = response_text
        self.calls: list[dict] = []

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
        t0 = time.monotonic()
        self.calls.append(
            {
                "prompt": prompt,
                "system_prompt": system_prompt,
                "model": model,
                "temperature": temperature,
                "json_mode": json_mode,
            }
        )
        text = self.response_text
        elapsed = (time.monotonic() - t0) * 1000
        return ProviderResult(
            raw_text=text,
            model=model or "mock-v1",
            provider=self.name,
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(text.split()),
            latency_ms=round(elapsed, 2),
        )
