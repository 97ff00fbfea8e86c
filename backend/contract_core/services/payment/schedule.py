"""Payment schedule generator.

Turns a contract total and start date into two alternative plans:
  - installments (fixed 40/30/30 split, or N equal/explicit installments);
  - a single payment with a 3% discount, due on the start date.

Money is computed in ``Decimal`` and rounded half-up to cents; a computed last
installment takes ``total - sum(previous)`` so the plan adds up to the total.
Unparseable dates fall back to today's date (logged). Installment counts are
capped at ``MAX_RECORD_INSTALLMENTS``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from contract_core.schemas.contract import PaymentInstallment, PaymentOption, PaymentScheduleResult
from contract_core.services.amounts import format_currency, parse_amount, round_money
from contract_core.services.dates import add_months, to_iso_or_today

from .rules import (
    FIXED_PERCENTAGES,
    INSTALLMENT_INTERVAL_MONTHS,
    MAX_RECORD_INSTALLMENTS,
    SINGLE_PAYMENT_DISCOUNT_PERCENTAGE,
    recommend_option,
)

logger = logging.getLogger(__name__)

Log = Optional[logging.Logger | logging.LoggerAdapter]


class PaymentScheduleError(ValueError):
    pass


@dataclass(frozen=True)
class ScheduleInputs:
    """Schedule arguments pulled out of an extracted contract record."""

    total_amount: float
    start_date: str
    installment_count: Optional[int] = None
    explicit_amounts: dict[int, str] = field(default_factory=dict)
    explicit_dates: dict[int, str] = field(default_factory=dict)


# ─── Helpers ───────────────────────────────────────────


def _validate_total(total_amount: Any) -> Decimal:
    number = None if isinstance(total_amount, bool) else parse_amount(total_amount)
    if number is None or number <= 0:
        raise PaymentScheduleError(f"Total amount must be a positive number, got {total_amount!r}")
    return Decimal(str(number))


def _clean_mapping(values: Optional[Mapping[Any, Any]]) -> dict[int, str]:
    cleaned: dict[int, str] = {}
    for key, value in (values or {}).items():
        if value is None or str(value).strip() == "":
            continue
        cleaned[int(key)] = str(value)
    return cleaned


def _due_date(index: int, start_iso: str, explicit: Optional[str], today: Optional[date], log: Log) -> str:
    """Explicit date if given, else ``start + index * 4 months`` (index 0 = start)."""
    if explicit:
        return to_iso_or_today(explicit, field=f"installment {index + 1} date", today=today, log=log)
    try:
        return add_months(start_iso, index * INSTALLMENT_INTERVAL_MONTHS)
    except (ValueError, OverflowError) as exc:
        raise PaymentScheduleError(f"Installment {index + 1} due date is out of range from {start_iso}") from exc


def _percentage(amount: Decimal, total: Decimal) -> float:
    return float(round_money(amount / total * 100))


# ─── Options ───────────────────────────────────────────


def build_fixed_installments_option(
    total: Decimal,
    start_iso: str,
    explicit_dates: Optional[Mapping[int, str]] = None,
    *,
    today: Optional[date] = None,
    log: Log = None,
) -> PaymentOption:
    """Three installments of 40%, 30% and 30% (the third is the remainder)."""
    dates = _clean_mapping(explicit_dates)
    installments: list[PaymentInstallment] = []
    cumulative = Decimal("0")
    last_index = len(FIXED_PERCENTAGES) - 1

    for index, percentage in enumerate(FIXED_PERCENTAGES):
        if index == last_index:
            amount = total - cumulative
        else:
            amount = round_money(total * percentage / 100)
            cumulative += amount

        number = index + 1
        installments.append(
            PaymentInstallment(
                installment_number=number,
                amount=float(amount),
                percentage=percentage,
                due_date=_due_date(index, start_iso, dates.get(number), today, log),
                description=f"{number}° rata ({percentage}%)",
                payment_type="installment",
            )
        )

    split = ", ".join(f"{p}%" for p in FIXED_PERCENTAGES)
    return PaymentOption(
        type="installments",
        total_amount=float(total),
        installments=installments,
        description=f"Pagamento rateale in {len(FIXED_PERCENTAGES)} rate: {split} del totale",
    )


def build_split_installments_option(
    total: Decimal,
    start_iso: str,
    installment_count: int,
    explicit_dates: Optional[Mapping[int, str]] = None,
    explicit_amounts: Optional[Mapping[int, str]] = None,
    *,
    today: Optional[date] = None,
    log: Log = None,
) -> PaymentOption:
    """N installments: explicit amounts verbatim, otherwise an equal share.

    The last installment, unless given explicitly, takes the remainder; an
    explicit last amount is kept as is, so the plan may not add up to the total.
    Installments whose amount is missing or not positive are dropped and the
    remaining ones keep their original ``installment_number``.
    """
    log = log or logger
    dates = _clean_mapping(explicit_dates)
    amounts = _clean_mapping(explicit_amounts)
    equal_share = round_money(total / installment_count)
    installments: list[PaymentInstallment] = []
    allocated = Decimal("0")

    for number in range(1, installment_count + 1):
        amount: Optional[Decimal]
        if number in amounts:
            parsed = parse_amount(amounts[number])
            amount = Decimal(str(parsed)) if parsed is not None else None
        elif number == installment_count:
            amount = total - allocated
        else:
            amount = equal_share

        if amount is None or amount <= 0:
            log.warning(
                "Dropping installment %d: amount %r is missing or not positive",
                number,
                amounts[number] if number in amounts else amount,
            )
            continue

        allocated += amount
        installments.append(
            PaymentInstallment(
                installment_number=number,
                amount=float(amount),
                percentage=_percentage(amount, total),
                due_date=_due_date(number - 1, start_iso, dates.get(number), today, log),
                description=f"{number}° rata",
                payment_type="installment",
            )
        )

    return PaymentOption(
        type="installments",
        total_amount=float(total),
        installments=installments,
        description=f"Pagamento rateale in {len(installments)} rate",
    )


def build_single_payment_option(total: Decimal, start_iso: str) -> PaymentOption:
    """Single payment on the start date with a flat 3% discount."""
    discount_percentage = SINGLE_PAYMENT_DISCOUNT_PERCENTAGE
    discount_amount = round_money(total * discount_percentage / 100)
    final_amount = total - discount_amount

    return PaymentOption(
        type="single_with_discount",
        total_amount=float(final_amount),
        discount_percentage=discount_percentage,
        discount_amount=float(discount_amount),
        installments=[
            PaymentInstallment(
                installment_number=1,
                amount=float(final_amount),
                percentage=100,
                due_date=start_iso,
                description=f"Pagamento unico con sconto {discount_percentage}%",
                payment_type="single_with_discount",
            )
        ],
        description=(
            f"Pagamento unico anticipato con sconto del {discount_percentage}% "
            f"(risparmio di {format_currency(discount_amount)})"
        ),
    )


# ─── Public API ────────────────────────────────────────


def generate_payment_schedule(
    total_amount: float,
    start_date: str,
    installment_dates: Optional[Mapping[int, str]] = None,
    *,
    today: Optional[date] = None,
    log: Log = None,
) -> PaymentScheduleResult:
    """Fixed three-installment (40/30/30) plan plus the discounted single payment.

    *installment_dates* maps installment number (1-3) to a contract date.
    """
    total = _validate_total(total_amount)
    log = log or logger
    log.info("Generating payment schedule for total: %s", format_currency(total))

    start_iso = to_iso_or_today(start_date, field="start date", today=today, log=log)
    return PaymentScheduleResult(
        options=[
            build_fixed_installments_option(total, start_iso, installment_dates, today=today, log=log),
            build_single_payment_option(total, start_iso),
        ],
        recommended_option=recommend_option(total),
    )


def generate_installment_schedule(
    total_amount: float,
    start_date: str,
    installment_count: int,
    explicit_dates: Optional[Mapping[int, str]] = None,
    explicit_amounts: Optional[Mapping[int, str]] = None,
    *,
    today: Optional[date] = None,
    log: Log = None,
) -> PaymentScheduleResult:
    """N-installment plan plus the discounted single payment.

    *explicit_dates* / *explicit_amounts* are keyed by installment number
    (1..N) and hold the values found in the contract text.
    """
    total = _validate_total(total_amount)
    if isinstance(installment_count, bool) or not isinstance(installment_count, int) or installment_count < 1:
        raise PaymentScheduleError(f"Installment count must be at least 1, got {installment_count!r}")
    if installment_count > MAX_RECORD_INSTALLMENTS:
        raise PaymentScheduleError(
            f"Installment count must be at most {MAX_RECORD_INSTALLMENTS}, got {installment_count}"
        )

    log = log or logger
    log.info(
        "Generating %d-installment payment schedule for total: %s",
        installment_count,
        format_currency(total),
    )

    start_iso = to_iso_or_today(start_date, field="start date", today=today, log=log)
    return PaymentScheduleResult(
        options=[
            build_split_installments_option(
                total,
                start_iso,
                installment_count,
                explicit_dates,
                explicit_amounts,
                today=today,
                log=log,
            ),
            build_single_payment_option(total, start_iso),
        ],
        recommended_option=recommend_option(total),
    )


def schedule_inputs_from_record(data: Mapping[str, Any], *, log: Log = None) -> Optional[ScheduleInputs]:
    """Pull schedule arguments out of an extracted record.

    Returns ``None`` when the record has no usable total or start date. A
    count above ``MAX_RECORD_INSTALLMENTS`` is ignored (logged), which selects
    the fixed plan.
    """
    total = parse_amount(data.get("rent_total"))
    start_date = data.get("start_date")
    if total is None or total <= 0 or not start_date:
        return None

    explicit_amounts: dict[int, str] = {}
    explicit_dates: dict[int, str] = {}
    for number in range(1, MAX_RECORD_INSTALLMENTS + 1):
        amount = data.get(f"installment_{number}_amount")
        due = data.get(f"installment_{number}_date")
        if amount is not None and amount != "":
            explicit_amounts[number] = str(amount)
        if due:
            explicit_dates[number] = str(due)

    count = parse_amount(data.get("number_of_installments"))
    installment_count = int(count) if count is not None and count >= 1 else None
    if installment_count is not None and installment_count > MAX_RECORD_INSTALLMENTS:
        (log or logger).warning(
            "Ignoring number_of_installments %d (max %d); using the fixed split",
            installment_count,
            MAX_RECORD_INSTALLMENTS,
        )
        installment_count = None

    return ScheduleInputs(
        total_amount=total,
        start_date=str(start_date),
        installment_count=installment_count,
        explicit_amounts=explicit_amounts,
        explicit_dates=explicit_dates,
    )


def generate_schedule_from_record(
    data: Mapping[str, Any],
    *,
    today: Optional[date] = None,
    log: Log = None,
) -> Optional[PaymentScheduleResult]:
    """Schedule for an extracted record, or ``None`` without total/start date.

    Uses the N-installment plan when the record states the number of
    installments, otherwise the fixed 40/30/30 plan with any contract dates.
    """
    inputs = schedule_inputs_from_record(data, log=log)
    if inputs is None:
        (log or logger).info("Record has no total amount or start date; no payment schedule")
        return None

    if inputs.installment_count:
        return generate_installment_schedule(
            inputs.total_amount,
            inputs.start_date,
            inputs.installment_count,
            inputs.explicit_dates,
            inputs.explicit_amounts,
            today=today,
            log=log,
        )
    return generate_payment_schedule(
        inputs.total_amount,
        inputs.start_date,
        inputs.explicit_dates,
        today=today,
        log=log,
    )
