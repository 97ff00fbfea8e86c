"""Abstract base for all AI providers."""

from __future__ import annotations

import abc
import time
from dataclasses import dataclass
from typing import Any

import httpx


class ProviderConfigError(RuntimeError):
    """Provider is unknown, not allowed, or missing credentials."""


@dataclass(frozen=True)
class ProviderResult:
    """Immutable result returned by every provider."""

    raw_text: str
    model: str
    provider: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    latency_ms: float = 0.0


class BaseProvider(abc.ABC):
    """Contract that every AI provider must implement."""

    name: str = "base"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    async def _post_json(
        self,
        url: str,
        *,
        headers: dict[str, str],
        payload: dict[str, Any],
        timeout_seconds: float,
    ) -> tuple[dict[str, Any], float]:
        """POST *payload* and return ``(response json, latency in ms)``.

        Non-2xx responses raise ``httpx.HTTPStatusError``.
        """
        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=timeout_seconds, transport=self._transport) as client:
            resp = await client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            data = resp.json()
        return data, round((time.monotonic() - t0) * 1000, 2)

    @abc.abstractmethod
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
        """Send *prompt* and return a ``ProviderResult``.

        Network failures and non-2xx responses propagate as ``httpx`` errors.
        """
