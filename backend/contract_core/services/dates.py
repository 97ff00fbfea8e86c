"""Italian contract date normalization shared by extraction and payment schedules.

Accepted shapes (anything else is a parse failure):
  - ``DD/MM/YYYY``            e.g. ``10/10/2025``
  - ``D <mese> YYYY``          e.g. ``10 ottobre 2025`` (month name case-insensitive)
  - ``YYYY-MM-DD``            already ISO, returned unchanged

``normalize_date`` never raises; each call site decides explicitly whether a
failure becomes ``None`` (``to_iso_or_none``) or today's date
(``to_iso_or_today``). Both log the failure.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

ITALIAN_MONTHS: dict[str, int] = {
    "gennaio": 1,
    "febbraio": 2,
    "marzo": 3,
    "aprile": 4,
    "maggio": 5,
    "giugno": 6,
    "luglio": 7,
    "agosto": 8,
    "settembre": 9,
    "ottobre": 10,
    "novembre": 11,
    "dicembre": 12,
}

_SLASH_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_MONTH_NAME_RE = re.compile(r"(\d{1,2})\s+([^\W\d_]+)\s+(\d{4})", re.IGNORECASE)
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


@dataclass(frozen=True)
class DateParseResult:
    """Outcome of ``normalize_date``: either an ISO ``value`` or an ``error``."""

    source: str
    value: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _build(source: str, year: int, month: int, day: int) -> DateParseResult:
    try:
        parsed = date(year, month, day)
    except ValueError as exc:
        return DateParseResult(source=source, error=f"invalid calendar date: {exc}")
    return DateParseResult(source=source, value=parsed.isoformat())


def normalize_date(text: Optional[str]) -> DateParseResult:
    """Normalize an Italian contract date to ``YYYY-MM-DD``."""
    if text is None:
        return DateParseResult(source="", error="no date given")

    raw = str(text).strip()
    if not raw:
        return DateParseResult(source=raw, error="no date given")

    match = _ISO_RE.fullmatch(raw)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _build(raw, year, month, day)

    match = _SLASH_RE.fullmatch(raw)
    if match:
        day, month, year = (int(part) for part in match.groups())
        return _build(raw, year, month, day)

    match = _MONTH_NAME_RE.search(raw)
    if match:
        day_s, month_name, year_s = match.groups()
        month = ITALIAN_MONTHS.get(month_name.lower())
        if month is None:
            return DateParseResult(source=raw, error=f"unknown month name {month_name!r}")
        return _build(raw, int(year_s), month, int(day_s))

    return DateParseResult(source=raw, error="unrecognized date format")


def to_iso_or_none(
    text: Optional[str],
    *,
    field: str = "date",
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> Optional[str]:
    """Return the ISO date, or ``None`` when *text* is missing or unparseable."""
    if text is None or not str(text).strip():
        return None
    result = normalize_date(text)
    if result.ok:
        return result.value
    (log or logger).warning("Could not normalize %s %r: %s", field, result.source, result.error)
    return None


def to_iso_or_today(
    text: Optional[str],
    *,
    field: str = "date",
    today: Optional[date] = None,
    log: Optional[logging.Logger | logging.LoggerAdapter] = None,
) -> str:
    """Return the ISO date, falling back to today's date on any failure.

    The fallback is logged at WARNING.
    """
    result = normalize_date(text)
    if result.ok:
        return result.value
    fallback = (today or date.today()).isoformat()
    (log or logger).warning(
        "Could not normalize %s %r (%s); using current date %s",
        field,
        result.source,
        result.error,
        fallback,
    )
    return fallback


def add_months(iso_date: str, months: int) -> str:
    """Add *months* to an ISO date, clamping to the last day of short months."""
    start = date.fromisoformat(iso_date)
    return (start + relativedelta(months=months)).isoformat()
