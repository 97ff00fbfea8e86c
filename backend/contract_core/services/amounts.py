"""Euro amount parsing and formatting for Italian contract text."""

from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

CENT = Decimal("0.01")

_CURRENCY_RE = re.compile(r"€|\beur(?:o)?\b|\$", re.IGNORECASE)
_DOT_THOUSANDS_RE = re.compile(r"\d{1,3}(?:\.\d{3})+")


def parse_amount(value: Any) -> Optional[float]:
    """Parse an amount such as ``"€ 12.360,00"`` into ``12360.0``.

    Returns ``None`` for anything that does not yield a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = _CURRENCY_RE.sub("", str(value))
    text = re.sub(r"[\s ']", "", text).strip(".,")
    if not text:
        return None

    if "," in text and "." in text:
        # The right-most separator is the decimal one.
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".") if text.count(",") == 1 else text.replace(",", "")
    elif _DOT_THOUSANDS_RE.fullmatch(text):
        text = text.replace(".", "")

    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def round_money(value: float | Decimal) -> Decimal:
    """Round half-up to cents, working on the decimal representation."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: float | Decimal) -> str:
    """Format *amount* the Italian way: ``12360`` -> ``"€12.360,00"``."""
    formatted = f"{round_money(amount):,.2f}"
    return "€" + formatted.replace(",", "_").replace(".", ",").replace("_", ".")
