"""Delegate extraction: asks an external language model to fill the record.

The model works on any rental/lease document, not only the Unicampus
template. Output must be one flat JSON object over ``AI_FIELDS``; anything
else is a hard failure. No retry and no fallback to the pattern strategy.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from contract_core.core.config import get_settings
from contract_core.schemas.contract import ExtractionConfidence, ExtractionResult
from contract_core.services.ai.common import router as ai_router
from contract_core.services.ai.common.providers import ProviderConfigError
from contract_core.services.amounts import parse_amount

from .base import ContractExtractor, ExtractionServiceError, require_text
from .fields import (
    AI_FIELDS,
    AI_MAX_INSTALLMENTS,
    INTEGER_FIELDS,
    NUMERIC_FIELDS,
    empty_record,
    is_filled,
)

logger = logging.getLogger(__name__)

SCOPE = "contract_extract"

_INSTALLMENT_AMOUNT_RE = re.compile(r"installment_\d+_amount")

SYSTEM_PROMPT = """You are an expert at extracting structured data from rental contracts, leases and housing agreements written in ANY language.

Find the requested information regardless of the document's language, format or terminology:
- "tenant" = "guest" = "renter" = "lessee" = "student" = "occupant"
- "landlord" = "lessor" = "provider" = "owner"
- "rent" = "monthly payment" = "rental fee" = "retta" = "canone"
- "deposit" = "security deposit" = "caution" = "bond" = "deposito cauzionale"

Rules:
1. Use null for any field not found in the document.
2. Keep dates exactly as written in the document; do not convert them.
3. Write numbers without currency symbols or thousands separators.
4. Look for payment schedules in any form (tables, lists, paragraphs).
5. Return ONLY one valid JSON object."""

USER_PROMPT = """Extract all relevant information from this rental/lease document:

{content}

Return a FLAT JSON object (no nesting, no grouping under categories) with exactly these keys at the root level, using null when a value is not found:
{fields}

Installments:
- Number them sequentially: installment_1_amount/installment_1_date, installment_2_amount/installment_2_date, ...
- Always extract both amount and date for each installment, up to installment_{max_installments}.
- Set number_of_installments to the number of installments found.
- Use null for installments that do not exist, never empty strings."""


def build_prompt(text: str, max_chars: int = 0) -> str:
    content = text[:max_chars] if max_chars > 0 else text
    return USER_PROMPT.format(
        content=content,
        fields=json.dumps(list(AI_FIELDS)),
        max_installments=AI_MAX_INSTALLMENTS,
    )


def parse_flat_response(raw_text: str) -> dict[str, Any]:
    """Parse the model output strictly as one flat JSON object."""
    try:
        parsed = json.loads(raw_text)
    except (TypeError, ValueError) as exc:
        raise ExtractionServiceError("AI response is not valid JSON") from exc

    if not isinstance(parsed, dict):
        raise ExtractionServiceError(f"AI response is a JSON {type(parsed).__name__}, expected an object")

    nested = sorted(key for key, value in parsed.items() if isinstance(value, (dict, list)))
    if nested:
        raise ExtractionServiceError(f"AI response is not flat; nested keys: {nested}")
    return parsed


def _coerce(key: str, value: Any, log: logging.Logger | logging.LoggerAdapter) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    if value is None:
        return None
    if key in NUMERIC_FIELDS or _INSTALLMENT_AMOUNT_RE.fullmatch(key):
        number = parse_amount(value)
        if number is None:
            log.warning("Discarding non-numeric %s %r from AI response", key, value)
        return number
    if key in INTEGER_FIELDS:
        number = parse_amount(value)
        if number is None:
            log.warning("Discarding non-numeric %s %r from AI response", key, value)
            return None
        return int(number)
    return value


def build_ai_record(
    parsed: dict[str, Any],
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> dict[str, Any]:
    """Merge the model output over the full canonical field set."""
    log = log or logger
    data: dict[str, Any] = empty_record(AI_FIELDS)
    for key, value in parsed.items():
        data[str(key)] = _coerce(str(key), value, log)
    return data


def score_all_fields(data: dict[str, Any]) -> ExtractionConfidence:
    """Every field of the record participates, filled = 1."""
    field_scores = {key: int(is_filled(value)) for key, value in data.items()}
    overall = sum(field_scores.values()) / len(field_scores) if field_scores else 0.0
    return ExtractionConfidence(overall=overall, field_scores=field_scores)


class AIContractExtractor(ContractExtractor):
    """Extraction delegated to an external reasoning service."""

    name = "ai"

    def __init__(
        self,
        config: ai_router.ResolvedConfig | None = None,
        *,
        override_provider: str | None = None,
        override_model: str | None = None,
        log: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ) -> None:
        self._config = config
        self._override_provider = override_provider
        self._override_model = override_model
        self._log = log or logger

    def _resolve(self) -> ai_router.ResolvedConfig:
        if self._config is not None:
            return self._config
        try:
            return ai_router.resolve(
                SCOPE,
                override_provider=self._override_provider,
                override_model=self._override_model,
            )
        except ProviderConfigError as exc:
            raise ExtractionServiceError(f"AI extraction is not configured: {exc}") from exc

    async def extract(self, text: str) -> ExtractionResult:
        require_text(text)
        config = self._resolve()
        settings = get_settings()
        prompt = build_prompt(text, settings.ai_contract_extract_max_chars)

        self._log.info(
            "Extracting contract fields with AI provider %s (model %s)",
            config.provider.name,
            config.model or "default",
        )

        try:
            result = await config.provider.generate(
                prompt,
                system_prompt=SYSTEM_PROMPT,
                model=config.model,
                temperature=0.0,
                max_tokens=config.max_tokens,
                timeout_seconds=config.timeout_seconds,
                json_mode=True,
            )
        except Exception as exc:
            self._log.exception("AI contract extraction failed")
            raise ExtractionServiceError(f"AI extraction failed: {exc}") from exc

        self._log.debug("AI raw response: %s", result.raw_text[:500])

        try:
            parsed = parse_flat_response(result.raw_text)
        except ExtractionServiceError:
            self._log.error("Unusable AI response: %s", result.raw_text[:500])
            raise

        data = build_ai_record(parsed, self._log)
        confidence = score_all_fields(data)
        self._log.info("AI extraction complete. Confidence: %.1f%%", confidence.overall * 100)

        return ExtractionResult(
            data=data,
            confidence=confidence,
            strategy=self.name,
            raw_matches={"ai_response": result.raw_text},
            model_version=f"{result.provider}:{result.model}",
        )
