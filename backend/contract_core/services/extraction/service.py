"""Contract extraction entry point: picks a strategy and runs it."""

from __future__ import annotations

import logging
from typing import Optional

from contract_core.core.config import get_settings
from contract_core.schemas.contract import ExtractionResult
from contract_core.services.text_cleaning import clean_text

from .ai import AIContractExtractor
from .base import ContractExtractor, require_text
from .patterns import PatternContractExtractor

logger = logging.getLogger(__name__)

STRATEGIES: dict[str, type[ContractExtractor]] = {
    PatternContractExtractor.name: PatternContractExtractor,
    AIContractExtractor.name: AIContractExtractor,
}


def get_extractor(
    strategy: str | None = None,
    *,
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> ContractExtractor:
    """Return the extractor for *strategy* (default: ``CONTRACT_EXTRACTION_STRATEGY``)."""
    name = (strategy or get_settings().contract_extraction_strategy or "pattern").lower().strip()
    extractor_cls = STRATEGIES.get(name)
    if extractor_cls is None:
        raise ValueError(f"Unknown extraction strategy {name!r}; valid: {sorted(STRATEGIES)}")
    return extractor_cls(log=log)


async def extract_contract(
    text: str,
    *,
    strategy: str | None = None,
    extractor: ContractExtractor | None = None,
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> ExtractionResult:
    """Clean *text* and extract the contract record.

    Raises ``ExtractionInputError`` for empty text and
    ``ExtractionServiceError`` when the AI delegate fails.
    """
    require_text(text)
    extractor = extractor or get_extractor(strategy, log=log)
    (log or logger).info("Extracting contract data with %s strategy", extractor.name)
    return await extractor.extract(clean_text(text))
