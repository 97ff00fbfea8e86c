"""Abstract base for contract extraction strategies."""

from __future__ import annotations

import abc

from contract_core.schemas.contract import ExtractionResult


class ExtractionError(Exception):
    pass


class ExtractionInputError(ExtractionError, ValueError):
    pass


class ExtractionServiceError(ExtractionError):
    pass


def require_text(text: str | None) -> str:
    if text is None or not isinstance(text, str) or not text.strip():
        raise ExtractionInputError("Contract text is empty")
    return text


class ContractExtractor(abc.ABC):
    """Contract that every extraction strategy must implement."""

    name: str = "base"

    @abc.abstractmethod
    async def extract(self, text: str) -> ExtractionResult:
        """Extract the canonical record and its confidence from *text*."""
