"""Canonical field sets of the extracted contract record."""

from __future__ import annotations

PATTERN_MAX_INSTALLMENTS = 3
AI_MAX_INSTALLMENTS = 10

BASE_FIELDS: tuple[str, ...] = (
    "guest_name",
    "birth_date",
    "birth_place",
    "fiscal_code",
    "residence_city",
    "residence_address",
    "accommodation_address",
    "university",
    "academic_year",
    "start_date",
    "end_date",
    "rent_total",
    "monthly_rent",
    "security_deposit",
    "number_of_installments",
)

TRAILING_FIELDS: tuple[str, ...] = ("contract_type", "provider")

NUMERIC_FIELDS = frozenset({"rent_total", "monthly_rent", "security_deposit"})
INTEGER_FIELDS = frozenset({"number_of_installments"})

# Confidence population of the pattern strategy. Installment, university and
# academic-year fields are not scored.
PATTERN_SCORED_FIELDS: tuple[str, ...] = (
    "guest_name",
    "birth_date",
    "fiscal_code",
    "residence",
    "rent_total",
    "security_deposit",
    "dates",
    "accommodation_address",
)


def installment_fields(count: int) -> tuple[str, ...]:
    fields: list[str] = []
    for number in range(1, count + 1):
        fields.append(f"installment_{number}_amount")
        fields.append(f"installment_{number}_date")
    return tuple(fields)


def canonical_fields(max_installments: int) -> tuple[str, ...]:
    return BASE_FIELDS + installment_fields(max_installments) + TRAILING_FIELDS


PATTERN_FIELDS = canonical_fields(PATTERN_MAX_INSTALLMENTS)
AI_FIELDS = canonical_fields(AI_MAX_INSTALLMENTS)


def empty_record(fields: tuple[str, ...]) -> dict[str, None]:
    return dict.fromkeys(fields)


def is_filled(value) -> bool:
    return value is not None and value != ""
