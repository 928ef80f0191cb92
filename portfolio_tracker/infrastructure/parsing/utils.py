"""Shared parsing utilities for user input and imported history files."""
from __future__ import annotations

import math
from io import BytesIO
from pathlib import Path

from portfolio_tracker.errors import InvalidValueError

CURRENCY_SYMBOLS = ("£", "₹", "$", "€")


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def clean_amount_text(value: object) -> str:
    s = "" if value is None else str(value).strip()
    for ch in CURRENCY_SYMBOLS + (",", '"', " "):
        s = s.replace(ch, "")
    return s


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    s = str(value).strip()
    return not s or s.upper() == "NAN"


def parse_amount(value: object) -> float:
    """Parse a user-entered amount such as ``£1,250.50`` into a float."""
    if isinstance(value, bool):
        raise InvalidValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        s = clean_amount_text(value)
        if not s:
            raise InvalidValueError("Amount is empty")
        try:
            result = float(s)
        except ValueError as exc:
            raise InvalidValueError(f"Not a numeric amount: {value!r}") from exc
    if not math.isfinite(result):
        raise InvalidValueError(f"Amount must be finite, got {value!r}")
    return result
