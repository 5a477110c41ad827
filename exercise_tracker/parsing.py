"""Lenient parsing of form and query values.

Clients submit every field as text.  The helpers here turn that text into
integers and calendar dates and report failure as ``None`` instead of
raising, so callers decide whether an unparsable value is an error or is
carried forward as an invalid value.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

DISPLAY_DATE_FORMAT = "%a %b %d %Y"

INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_TEXTUAL_DATE_FORMATS = (
    DISPLAY_DATE_FORMAT,
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m",
    "%Y",
)


def parse_int(value: Optional[str], *, saturate: bool = False) -> Optional[int]:
    """Parse the leading integer of ``value``.

    ``"30"``, ``" 30"``, ``"30min"`` and ``"30.9"`` all give ``30``.  Text
    that does not start with digits (after an optional sign) gives ``None``.

    Values outside the signed 64-bit range give ``None``, or are clamped to
    that range when ``saturate`` is set.
    """

    if value is None:
        return None
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    digits = match.group(1)
    try:
        number = int(digits)
    except ValueError:
        # More digits than the interpreter will convert.
        number = INT64_MIN - 1 if digits.startswith("-") else INT64_MAX + 1
    if INT64_MIN <= number <= INT64_MAX:
        return number
    if not saturate:
        return None
    return INT64_MAX if number > 0 else INT64_MIN


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse ``value`` into a calendar date, or ``None`` when it is not one.

    ISO dates and date-times are accepted as well as a handful of textual
    forms, including the display format produced by :func:`format_date`.
    For date-times the calendar date is taken as written; no timezone
    conversion is applied.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    iso_text = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(iso_text).date()
    except ValueError:
        pass

    for fmt in _TEXTUAL_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: date) -> str:
    """Render ``value`` as e.g. ``"Mon Jan 15 2024"``."""

    return value.strftime(DISPLAY_DATE_FORMAT)


__all__ = ["DISPLAY_DATE_FORMAT", "format_date", "parse_date", "parse_int"]
