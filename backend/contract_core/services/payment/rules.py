"""Payment schedule rules (deterministic, no AI)."""

from __future__ import annotations

from decimal import Decimal

# Fixed split: the last installment takes the remainder, not its percentage.
FIXED_PERCENTAGES: tuple[int, ...] = (40, 30, 30)

SINGLE_PAYMENT_DISCOUNT_PERCENTAGE = 3

# Strictly greater than: a total of exactly 5000 recommends the single payment.
INSTALLMENTS_RECOMMENDATION_THRESHOLD = Decimal("5000")

INSTALLMENT_INTERVAL_MONTHS = 4

MAX_RECORD_INSTALLMENTS = 10


def recommend_option(total_amount: Decimal) -> str:
    if total_amount > INSTALLMENTS_RECOMMENDATION_THRESHOLD:
        return "installments"
    return "single_with_discount"
