"""Tests for the AI delegate extraction strategy.

Covers:
- Response parsing: strict JSON, flat object only
- Record building: canonical field set, numeric coercion, null handling
- Confidence: every field participates
- Failures: provider errors, unusable responses, missing configuration
"""

import asyncio
import json
import os
import unittest
from unittest.mock import patch

import httpx

from contract_core.services.ai.common.router import ResolvedConfig
from contract_core.services.ai.common.providers.mock import MockProvider


def _config(provider) -> ResolvedConfig:
    return ResolvedConfig(provider=provider, model="mock-v1", max_tokens=512, timeout_seconds=2.0)


class FailingProvider(MockProvider):
    name = "failing"

    async def generate(self, prompt, **kwargs):
        raise httpx.ConnectError("connection refused")


class ParseFlatResponseTests(unittest.TestCase):
    def test_valid_object(self):
        from contract_core.services.extraction.ai import parse_flat_response

        self.assertEqual(parse_flat_response('{"guest_name": "Mario"}'), {"guest_name": "Mario"})

    def test_invalid_json_is_hard_failure(self):
        from contract_core.services.extraction.ai import parse_flat_response
        from contract_core.services.extraction.base import ExtractionServiceError

        with self.assertRaises(ExtractionServiceError):
            parse_flat_response("Here is the data: {guest_name: Mario}")

    def test_json_wrapped_in_prose_is_not_guessed(self):
        from contract_core.services.extraction.ai import parse_flat_response
        from contract_core.services.extraction.base import ExtractionServiceError

        with self.assertRaises(ExtractionServiceError):
            parse_flat_response('Sure! {"guest_name": "Mario"}')

    def test_array_is_rejected(self):
        from contract_core.services.extraction.ai import parse_flat_response
        from contract_core.services.extraction.base import ExtractionServiceError

        with self.assertRaises(ExtractionServiceError):
            parse_flat_response("[1, 2, 3]")

    def test_nested_object_is_rejected(self):
        from contract_core.services.extraction.ai import parse_flat_response
        from contract_core.services.extraction.base import ExtractionServiceError

        with self.assertRaises(ExtractionServiceError) as ctx:
            parse_flat_response('{"PERSONAL INFORMATION": {"guest_name": "Mario"}}')
        self.assertIn("PERSONAL INFORMATION", str(ctx.exception))


class BuildRecordTests(unittest.TestCase):
    def test_full_field_set_with_nulls(self):
        from contract_core.services.extraction.ai import build_ai_record
        from contract_core.services.extraction.fields import AI_FIELDS

        data = build_ai_record({"guest_name": "Mario Rossi"})
        self.assertEqual(set(data), set(AI_FIELDS))
        self.assertIn("installment_10_amount", data)
        self.assertIn("installment_10_date", data)
        self.assertEqual(data["guest_name"], "Mario Rossi")
        self.assertIsNone(data["rent_total"])

    def test_numbers_are_coerced_and_dates_kept_verbatim(self):
        from contract_core.services.extraction.ai import build_ai_record

        data = build_ai_record(
            {
                "rent_total": "12360",
                "security_deposit": "€ 250,00",
                "installment_1_amount": 4944,
                "installment_1_date": "10 ottobre 2025",
                "number_of_installments": "3",
                "start_date": "10/10/2025",
            }
        )
        self.assertEqual(data["rent_total"], 12360.0)
        self.assertEqual(data["security_deposit"], 250.0)
        self.assertEqual(data["installment_1_amount"], 4944.0)
        self.assertEqual(data["installment_1_date"], "10 ottobre 2025")
        self.assertEqual(data["number_of_installments"], 3)
        self.assertEqual(data["start_date"], "10/10/2025")

    def test_blank_and_non_numeric_values_become_null(self):
        from contract_core.services.extraction.ai import build_ai_record

        data = build_ai_record({"guest_name": "  ", "rent_total": "da definire"})
        self.assertIsNone(data["guest_name"])
        self.assertIsNone(data["rent_total"])

    def test_extra_fields_are_kept(self):
        from contract_core.services.extraction.ai import build_ai_record

        data = build_ai_record({"payment_method": "bonifico"})
        self.assertEqual(data["payment_method"], "bonifico")


class ScoreAllFieldsTests(unittest.TestCase):
    def test_every_field_participates(self):
        from contract_core.services.extraction.ai import score_all_fields

        confidence = score_all_fields({"a": "x", "b": None, "c": "", "d": 0})
        self.assertEqual(confidence.field_scores, {"a": 1, "b": 0, "c": 0, "d": 1})
        self.assertEqual(confidence.overall, 0.5)

    def test_empty_record(self):
        from contract_core.services.extraction.ai import score_all_fields

        self.assertEqual(score_all_fields({}).overall, 0.0)


class AIContractExtractorTests(unittest.TestCase):
    """Tests for AIContractExtractor with an injected mock provider."""

    def test_extract_with_mock_provider(self):
        from contract_core.services.extraction.ai import AIContractExtractor
        from contract_core.services.extraction.fields import AI_FIELDS

        response = {field: None for field in AI_FIELDS}
        response.update(
            {
                "guest_name": "Mario Rossi",
                "start_date": "10 ottobre 2025",
                "end_date": "30 giugno 2026",
                "rent_total": 12360,
                "number_of_installments": 3,
            }
        )
        provider = MockProvider(response_text=json.dumps(response))

        result = asyncio.run(AIContractExtractor(_config(provider)).extract("contratto di locazione"))

        self.assertEqual(result.strategy, "ai")
        self.assertEqual(result.data["guest_name"], "Mario Rossi")
        self.assertEqual(result.data["start_date"], "10 ottobre 2025")
        self.assertAlmostEqual(result.confidence.overall, 5 / len(AI_FIELDS))
        self.assertEqual(len(result.confidence.field_scores), len(AI_FIELDS))
        self.assertEqual(result.model_version, "mock:mock-v1")
        self.assertEqual(result.raw_matches["ai_response"], provider.response_text)

    def test_request_is_deterministic_json_mode(self):
        from contract_core.services.extraction.ai import SYSTEM_PROMPT, AIContractExtractor

        provider = MockProvider(response_text="{}")
        asyncio.run(AIContractExtractor(_config(provider)).extract("Il/La Sig./Sig.ra MARIO ROSSI"))

        self.assertEqual(len(provider.calls), 1)
        call = provider.calls[0]
        self.assertEqual(call["temperature"], 0.0)
        self.assertTrue(call["json_mode"])
        self.assertEqual(call["system_prompt"], SYSTEM_PROMPT)
        self.assertIn("MARIO ROSSI", call["prompt"])
        self.assertIn("installment_10_date", call["prompt"])

    @patch.dict(os.environ, {"AI_CONTRACT_EXTRACT_MAX_CHARS": "10"}, clear=False)
    def test_prompt_truncates_long_text(self):
        from contract_core.core.config import get_settings
        from contract_core.services.extraction.ai import AIContractExtractor

        get_settings.cache_clear()
        provider = MockProvider(response_text="{}")
        asyncio.run(AIContractExtractor(_config(provider)).extract("0123456789ABCDEF"))

        self.assertIn("0123456789", provider.calls[0]["prompt"])
        self.assertNotIn("ABCDEF", provider.calls[0]["prompt"])

    def test_empty_text_is_rejected_before_calling_provider(self):
        from contract_core.services.extraction.ai import AIContractExtractor
        from contract_core.services.extraction.base import ExtractionInputError

        provider = MockProvider()
        with self.assertRaises(ExtractionInputError):
            asyncio.run(AIContractExtractor(_config(provider)).extract("   "))
        self.assertEqual(provider.calls, [])

    def test_provider_error_propagates(self):
        from contract_core.services.extraction.ai import AIContractExtractor
        from contract_core.services.extraction.base import ExtractionServiceError

        with self.assertLogs("contract_core.services.extraction.ai", level="ERROR"):
            with self.assertRaises(ExtractionServiceError) as ctx:
                asyncio.run(AIContractExtractor(_config(FailingProvider())).extract("contratto"))
        self.assertIsInstance(ctx.exception.__cause__, httpx.ConnectError)

    def test_unparseable_response_propagates(self):
        from contract_core.services.extraction.ai import AIContractExtractor
        from contract_core.services.extraction.base import ExtractionServiceError

        provider = MockProvider(response_text="I could not find any data.")
        with self.assertRaises(ExtractionServiceError):
            asyncio.run(AIContractExtractor(_config(provider)).extract("contratto"))

    @patch.dict(
        os.environ,
        {"AI_CONTRACT_EXTRACT_PROVIDER": "openai", "OPENAI_API_KEY": ""},
        clear=False,
    )
    def test_missing_api_key_is_service_error(self):
        from contract_core.core.config import get_settings
        from contract_core.services.extraction.ai import AIContractExtractor
        from contract_core.services.extraction.base import ExtractionServiceError

        get_settings.cache_clear()
        with self.assertRaises(ExtractionServiceError) as ctx:
            asyncio.run(AIContractExtractor().extract("contratto"))
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))

    @patch.dict(
        os.environ,
        {"AI_CONTRACT_EXTRACT_PROVIDER": "mock", "AI_ALLOWED_PROVIDERS": "mock"},
        clear=False,
    )
    def test_resolves_provider_from_settings(self):
        from contract_core.core.config import get_settings
        from contract_core.services.extraction.ai import AIContractExtractor

        get_settings.cache_clear()
        result = asyncio.run(AIContractExtractor().extract("contratto"))

        self.assertEqual(result.model_version, "mock:mock-v1")
        self.assertEqual(result.confidence.overall, 0.0)
