"""AI Router: picks the provider and model for a scope (override > ENV > default)."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contract_core.core.config import Settings, get_settings

from .providers import BaseProvider, get_provider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "openai"

# scope -> (provider setting, model setting)
SCOPE_SETTINGS: dict[str, tuple[str, str]] = {
    "contract_extract": ("ai_contract_extract_provider", "ai_contract_extract_model"),
}


@dataclass(frozen=True)
class ResolvedConfig:
    """Provider instance plus the call parameters for one scope."""

    provider: BaseProvider
    model: str
    max_tokens: int
    timeout_seconds: float


def _scope_value(settings: Settings, scope: str, position: int) -> str:
    names = SCOPE_SETTINGS.get(scope)
    if names is None:
        return ""
    return (getattr(settings, names[position]) or "").strip()


def _allowed_model(settings: Settings, provider_name: str, model: str) -> str:
    allowed = settings.ai_allowed_models.get(provider_name, [])
    if not allowed:
        return model
    if model and model not in allowed:
        logger.warning(
            "Model %r not in allowlist for %r, using first allowed: %r",
            model,
            provider_name,
            allowed[0],
        )
        return allowed[0]
    return model or allowed[0]


def resolve(
    scope: str,
    *,
    override_provider: str | None = None,
    override_model: str | None = None,
) -> ResolvedConfig:
    """Resolve provider + model for *scope*.

    Runtime overrides count only when ``enable_ai_overrides`` is on; then the
    scope settings (``AI_CONTRACT_EXTRACT_PROVIDER`` / ``_MODEL``); then
    ``openai`` with its first allowed model. A model outside the provider's
    allowlist is replaced by the first allowed one.

    Raises ``ProviderConfigError`` when the provider cannot be built.
    """
    settings = get_settings()
    overrides = settings.enable_ai_overrides

    provider_name = (override_provider or "").lower().strip() if overrides else ""
    provider_name = provider_name or _scope_value(settings, scope, 0).lower() or DEFAULT_PROVIDER

    model = (override_model or "").strip() if overrides else ""
    model = _allowed_model(settings, provider_name, model or _scope_value(settings, scope, 1))

    logger.debug("Resolved AI scope %s to %s:%s", scope, provider_name, model or "<default>")
    return ResolvedConfig(
        provider=get_provider(provider_name),
        model=model,
        max_tokens=settings.ai_max_tokens,
        timeout_seconds=settings.ai_timeout_seconds,
    )
