"""Locale-independent text format for entry dates.

Dates are written as ``D Mon YYYY`` (``1 Jan 2024``). Reading also accepts
ISO ``YYYY-MM-DD`` and month keys such as ``Jan 24`` which map to the first
day of that month.
"""
from __future__ import annotations

import re
from datetime import date

from portfolio_tracker.errors import InvalidDateError

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(MONTH_ABBREVIATIONS, start=1)}

_MEDIUM_RE = re.compile(r"^(\d{1,2}) ([A-Za-z]{3}) (\d{4})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_MONTH_KEY_RE = re.compile(r"^([A-Za-z]{3}) (\d{2}|\d{4})$")


def format_entry_date(value: date) -> str:
    return f"{value.day} {MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


def parse_entry_date(text: str) -> date:
    raw = str(text).strip()
    match = _MEDIUM_RE.match(raw)
    if match:
        return _build(int(match.group(3)), _month(match.group(2), raw), int(match.group(1)), raw)
    match = _ISO_RE.match(raw)
    if match:
        return _build(int(match.group(1)), int(match.group(2)), int(match.group(3)), raw)
    match = _MONTH_KEY_RE.match(raw)
    if match:
        year = int(match.group(2))
        if year < 100:
            year += 2000
        return _build(year, _month(match.group(1), raw), 1, raw)
    raise InvalidDateError(f"Unrecognised date: {text!r}")


def _month(name: str, raw: str) -> int:
    month = _MONTH_LOOKUP.get(name.lower())
    if month is None:
        raise InvalidDateError(f"Unrecognised month in date: {raw!r}")
    return month


def _build(year: int, month: int, day: int, raw: str) -> date:
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date {raw!r}: {exc}") from exc
