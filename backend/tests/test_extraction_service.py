"""Tests for strategy selection and the extraction entry point."""

import json
import os
from unittest.mock import patch

import pytest

from contract_core.services.ai.common.providers.mock import MockProvider
from contract_core.services.ai.common.router import ResolvedConfig
from contract_core.services.extraction.ai import AIContractExtractor
from contract_core.services.extraction.base import ExtractionInputError, ExtractionServiceError
from contract_core.services.extraction.patterns import PatternContractExtractor
from contract_core.services.extraction.service import extract_contract, get_extractor


class TestGetExtractor:
    def test_default_is_pattern(self):
        with patch.dict(os.environ, {"CONTRACT_EXTRACTION_STRATEGY": "pattern"}, clear=False):
            assert isinstance(get_extractor(), PatternContractExtractor)

    def test_strategy_from_env(self):
        with patch.dict(os.environ, {"EXTRACTION_STRATEGY": "ai"}, clear=False):
            os.environ.pop("CONTRACT_EXTRACTION_STRATEGY", None)
            assert isinstance(get_extractor(), AIContractExtractor)

    def test_explicit_strategy_wins(self):
        with patch.dict(os.environ, {"CONTRACT_EXTRACTION_STRATEGY": "ai"}, clear=False):
            assert isinstance(get_extractor(" Pattern "), PatternContractExtractor)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="Unknown extraction strategy"):
            get_extractor("ocr")


class TestExtractContract:
    @pytest.mark.asyncio
    async def test_messy_whitespace_is_cleaned(self, unicampus_text):
        messy = "\n\n  " + unicampus_text.replace("\n", "\r\n").replace(" ", " \t ")
        result = await extract_contract(messy, strategy="pattern")

        assert result.strategy == "pattern"
        assert result.data["guest_name"] == "MARIO ROSSI"
        assert result.data["rent_total"] == 12360.0
        assert result.confidence.overall == 1.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n\t "])
    async def test_empty_text(self, text):
        with pytest.raises(ExtractionInputError):
            await extract_contract(text, strategy="pattern")

    @pytest.mark.asyncio
    async def test_empty_text_never_reaches_ai(self):
        provider = MockProvider()
        extractor = AIContractExtractor(_config(provider))
        with pytest.raises(ExtractionInputError):
            await extract_contract("  ", extractor=extractor)
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_injected_ai_extractor(self):
        provider = MockProvider(json.dumps({"guest_name": "Giulia Bianchi", "rent_total": "9.800,00"}))
        result = await extract_contract("Contratto di ospitalità", extractor=AIContractExtractor(_config(provider)))

        assert result.strategy == "ai"
        assert result.data["guest_name"] == "Giulia Bianchi"
        assert result.data["rent_total"] == 9800.0
        assert "Contratto di ospitalità" in provider.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_ai_failure_is_not_swallowed(self):
        provider = MockProvider("not json")
        with pytest.raises(ExtractionServiceError):
            await extract_contract("Contratto", extractor=AIContractExtractor(_config(provider)))


def _config(provider) -> ResolvedConfig:
    return ResolvedConfig(provider=provider, model="mock-v1", max_tokens=512, timeout_seconds=2.0)
