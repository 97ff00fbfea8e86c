"""Pattern-matching extraction for the Unicampus residence contract template.

Deterministic, no AI cost. Each rule targets one field (or a tightly related
group, e.g. birth place + date) and is applied independently of the others;
a rule that does not match leaves its fields ``None``. When a rule has more
than one phrasing, alternatives are tried in order and the first match wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from contract_core.schemas.contract import ExtractionConfidence, ExtractionResult
from contract_core.services.amounts import parse_amount
from contract_core.services.dates import to_iso_or_none

from .base import ContractExtractor, require_text
from .fields import PATTERN_FIELDS, PATTERN_SCORED_FIELDS, empty_record, is_filled

logger = logging.getLogger(__name__)

CONTRACT_TYPE = "Contratto di Ospitalità e Alloggio"
PROVIDER = "UNICAMPUSRESIDENCE S.R.L."

_FLAGS = re.IGNORECASE
_NAME = r"[^\W\d_]+(?:[ \t'.-]+[^\W\d_]+)*"
_DATE = r"\d{1,2}\s+[^\W\d_]+\s+\d{4}|\d{1,2}/\d{1,2}/\d{4}"
_AMOUNT = r"\d[\d.,]*"


@dataclass(frozen=True)
class PatternRule:
    """One semantic field group and its phrasings, in priority order."""

    name: str
    fields: tuple[str, ...]
    alternatives: tuple[tuple[re.Pattern, Callable[[re.Match], tuple[Any, ...]]], ...]


def _words(value: str) -> str:
    return " ".join(value.split())


def _rule(name: str, fields: tuple[str, ...], *alternatives) -> PatternRule:
    return PatternRule(
        name=name,
        fields=fields,
        alternatives=tuple((re.compile(pattern, flags), build) for pattern, flags, build in alternatives),
    )


def _installment_rule(number: int, ordinal: str) -> PatternRule:
    return _rule(
        f"installment_{number}",
        (f"installment_{number}_amount", f"installment_{number}_date"),
        (
            rf"€\s*({_AMOUNT})\s*,?\s+{ordinal}\s+rata\s+entro\s+il\s+({_DATE})",
            _FLAGS,
            lambda m: (parse_amount(m.group(1)), m.group(2)),
        ),
    )


RULES: tuple[PatternRule, ...] = (
    _rule(
        "guest_name",
        ("guest_name",),
        (
            rf"(?:E:\s*)?Il\s*/\s*La\s+Sig\.?\s*/\s*Sig\.?ra\.?\s+({_NAME})\s*,?\s+nato\s*/\s*a",
            _FLAGS,
            lambda m: (_words(m.group(1)),),
        ),
    ),
    _rule(
        "birth",
        ("birth_place", "birth_date"),
        (
            rf"nato\s*/\s*a\s+a\s+({_NAME})(?:\s*\([A-Z]{{2}}\))?\s*,?\s+il\s+(\d{{1,2}}/\d{{1,2}}/\d{{4}})",
            _FLAGS,
            lambda m: (_words(m.group(1)), m.group(2)),
        ),
    ),
    _rule(
        "fiscal_code",
        ("fiscal_code",),
        (
            r"C\.\s?F\.?\s*:?\s*([A-Z0-9]{16})(?![A-Z0-9])",
            _FLAGS,
            lambda m: (m.group(1).upper(),),
        ),
    ),
    _rule(
        "residence",
        ("residence_city", "residence_address"),
        (
            rf"residente\s+in\s+({_NAME})\s*,\s*([^\W\d_][^\d,\n]*?\d+(?:\s*/\s*[A-Z0-9]+)?)",
            _FLAGS,
            lambda m: (_words(m.group(1)), _words(m.group(2))),
        ),
    ),
    _rule(
        "rent_total",
        ("rent_total",),
        (
            rf"retta\s+di\s+(?:euro|eur|€)\.?\s*({_AMOUNT})",
            _FLAGS,
            lambda m: (parse_amount(m.group(1)),),
        ),
    ),
    _rule(
        "number_of_installments",
        ("number_of_installments",),
        (r"in\s+numero\s+(?:di\s+)?(\d+)\s+rate", _FLAGS, lambda m: (int(m.group(1)),)),
    ),
    _installment_rule(1, "prima"),
    _installment_rule(2, "seconda"),
    _installment_rule(3, "terza"),
    _rule(
        "security_deposit",
        ("security_deposit",),
        (
            rf"perdita\s+di\s+€\s*({_AMOUNT})",
            _FLAGS,
            lambda m: (parse_amount(m.group(1)),),
        ),
    ),
    _rule(
        "period",
        ("start_date", "end_date"),
        (
            rf"godimento.*?dal\s+({_DATE})\s*,?\s+al\s+({_DATE})",
            _FLAGS | re.DOTALL,
            lambda m: (m.group(1), m.group(2)),
        ),
    ),
    _rule(
        "accommodation",
        ("accommodation_address",),
        (r"Via\s+Nomentum\s+(\d+(?:/[A-Z0-9]+)?)", _FLAGS, lambda m: (f"Via Nomentum {m.group(1)}",)),
        (
            r"immobile\s+in\s+Roma\s*,\s*Via\s+([^\W\d_][^\d\n]*?\d+[\d/]*)",
            _FLAGS,
            lambda m: (f"Via {_words(m.group(1))}",),
        ),
    ),
    _rule(
        "university",
        ("university", "academic_year"),
        (
            r"Universit(?:à|a'?)\s+([^\W\d_]+).*?anno\s+accademico\s+(\d{4}\s*/\s*\d{2,4})",
            _FLAGS | re.DOTALL,
            lambda m: (m.group(1), re.sub(r"\s+", "", m.group(2))),
        ),
    ),
)

DATE_FIELDS: tuple[str, ...] = tuple(
    field for field in PATTERN_FIELDS if field.endswith("_date")
)


def score_pattern_record(data: dict[str, Any]) -> ExtractionConfidence:
    """Score the fixed field subset tracked for the pattern strategy."""
    presence = {
        "guest_name": is_filled(data.get("guest_name")),
        "birth_date": is_filled(data.get("birth_date")),
        "fiscal_code": is_filled(data.get("fiscal_code")),
        "residence": is_filled(data.get("residence_address")),
        "rent_total": is_filled(data.get("rent_total")),
        "security_deposit": is_filled(data.get("security_deposit")),
        "dates": is_filled(data.get("start_date")) and is_filled(data.get("end_date")),
        "accommodation_address": is_filled(data.get("accommodation_address")),
    }
    field_scores = {name: int(presence[name]) for name in PATTERN_SCORED_FIELDS}
    overall = sum(field_scores.values()) / len(field_scores)
    return ExtractionConfidence(overall=round(overall, 2), field_scores=field_scores)


class PatternContractExtractor(ContractExtractor):
    """Regex rules tuned to the Unicampus contract template."""

    name = "pattern"

    def __init__(self, log: Optional[logging.Logger | logging.LoggerAdapter] = None) -> None:
        self._log = log or logger

    def extract_fields(self, text: str) -> ExtractionResult:
        require_text(text)
        self._log.info("Extracting contract fields with %d pattern rules", len(RULES))

        data: dict[str, Any] = empty_record(PATTERN_FIELDS)
        raw_matches: dict[str, Optional[str]] = {}

        for rule in RULES:
            raw_matches[rule.name] = None
            for pattern, build in rule.alternatives:
                match = pattern.search(text)
                if match is None:
                    continue
                raw_matches[rule.name] = match.group(0)
                data.update(zip(rule.fields, build(match)))
                break

        for field in DATE_FIELDS:
            data[field] = to_iso_or_none(data[field], field=field, log=self._log)

        if any(raw_matches.values()):
            data["contract_type"] = CONTRACT_TYPE
            data["provider"] = PROVIDER

        confidence = score_pattern_record(data)
        self._log.info("Pattern extraction complete. Confidence: %.1f%%", confidence.overall * 100)

        return ExtractionResult(
            data=data,
            confidence=confidence,
            strategy=self.name,
            raw_matches=raw_matches,
        )

    async def extract(self, text: str) -> ExtractionResult:
        return self.extract_fields(text)


def extract_contract_fields(text: str) -> ExtractionResult:
    """Synchronous convenience wrapper around ``PatternContractExtractor``."""
    return PatternContractExtractor().extract_fields(text)
