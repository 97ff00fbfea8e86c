"""Tests for amount parsing/formatting and text cleaning."""

from __future__ import annotations

from decimal import Decimal

import pytest

from contract_core.services.amounts import format_currency, parse_amount, round_money
from contract_core.services.text_cleaning import clean_text


class TestParseAmount:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("12.360,00", 12360.0),
            ("12360,50", 12360.5),
            ("€ 250,00", 250.0),
            ("€4944", 4944.0),
            ("12.360", 12360.0),
            ("1.234.567", 1234567.0),
            ("250.50", 250.5),
            ("12,360.00", 12360.0),
            ("euro 1.000,00.", 1000.0),
            (4120, 4120.0),
            (370.8, 370.8),
        ],
    )
    def test_parses(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "€", "n/a", float("nan"), float("inf"), True])
    def test_not_a_number_is_none(self, raw):
        assert parse_amount(raw) is None


class TestMoney:
    def test_round_money_half_up(self):
        assert round_money(0.125) == Decimal("0.13")
        assert round_money(2.675) == Decimal("2.68")

    def test_format_currency_italian_grouping(self):
        assert format_currency(12360) == "€12.360,00"
        assert format_currency(370.8) == "€370,80"
        assert format_currency(Decimal("1234567.891")) == "€1.234.567,89"


class TestCleanText:
    def test_normalizes_whitespace(self):
        raw = "  Il/La\tSig./Sig.ra   MARIO\r\nROSSI\n\n\n\nnato/a  "
        assert clean_text(raw) == "Il/La Sig./Sig.ra MARIO\nROSSI\n\nnato/a"

    def test_keeps_paragraph_breaks(self):
        assert clean_text("a\n\nb") == "a\n\nb"
