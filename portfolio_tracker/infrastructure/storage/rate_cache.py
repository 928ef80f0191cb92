"""Cached exchange rate record used before the first refresh completes."""
from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from portfolio_tracker.domain.models import ExchangeRate
from portfolio_tracker.errors import InvalidRateError, PersistenceError


class JsonRateCache:
    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def load(self) -> ExchangeRate | None:
        if not self._path.exists():
            return None
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Error reading rate cache {self._path}: {exc}") from exc
        if not isinstance(data, dict) or "home_to_foreign" not in data:
            raise PersistenceError(f"Rate cache {self._path} has no home_to_foreign rate")

        timestamp = data.get("last_updated") or 0
        try:
            last_updated = datetime.fromtimestamp(float(timestamp)) if timestamp else None
            # the stored inverse is recomputed so the pair stays reciprocal
            return ExchangeRate.from_home_to_foreign(float(data["home_to_foreign"]), last_updated=last_updated)
        except (TypeError, ValueError, OverflowError, OSError, InvalidRateError) as exc:
            raise PersistenceError(f"Invalid rate cache {self._path}: {exc}") from exc

    def save(self, rate: ExchangeRate) -> None:
        record = {
            "home_to_foreign": rate.home_to_foreign,
            "foreign_to_home": rate.foreign_to_home,
            "last_updated": rate.last_updated.timestamp() if rate.last_updated else 0,
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(record, indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Error writing rate cache {self._path}: {exc}") from exc
