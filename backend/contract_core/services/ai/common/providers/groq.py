"""Groq provider (OpenAI-compatible chat completions API)."""

from __future__ import annotations

from .openai import OpenAIProvider


class GroqProvider(OpenAIProvider):
    name = "groq"
    endpoint = "https://api.groq.com/openai/v1/chat/completions"
    default_model = "llama-3.3-70b-versatile"
