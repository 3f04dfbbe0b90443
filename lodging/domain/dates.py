"""Calendar-date helpers: strict ISO parsing/formatting and day normalisation."""

from __future__ import annotations

import re
from datetime import date, datetime

_ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_iso_date(raw: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a date.

    Only the extended calendar-date form is accepted; compact forms, week
    dates and anything with a time component raise ``ValueError``.
    """
    if not isinstance(raw, str) or not _ISO_DATE_RE.fullmatch(raw):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {raw!r}")
    return date.fromisoformat(raw)


def format_iso_date(value: date) -> str:
    return as_day(value).isoformat()


def as_day(value: date | datetime) -> date:
    """Drop any time-of-day component; two values on one calendar day compare equal."""
    if isinstance(value, datetime):
        return value.date()
    return value


def coerce_day(value: object) -> date:
    """Pydantic ``before`` hook: accept date, datetime or ISO string only."""
    if isinstance(value, (date, datetime)):
        return as_day(value)
    if isinstance(value, str):
        return parse_iso_date(value)
    raise ValueError(f"Expected a YYYY-MM-DD date, got {value!r}")
