"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from datetime import date
from typing import Mapping, Protocol

from .models import ExchangeRate


class EntrySnapshotRepository(Protocol):
    """Reads and writes the whole entry snapshot at once."""

    def load(self) -> dict[str, dict[date, float]]:
        ...

    def save(self, entries: Mapping[str, Mapping[date, float]]) -> None:
        ...


class RateCache(Protocol):
    """Persists the last good exchange rate between runs."""

    def load(self) -> ExchangeRate | None:
        ...

    def save(self, rate: ExchangeRate) -> None:
        ...


class RateSource(Protocol):
    """Fetches the latest home-to-foreign rate from an external service."""

    def fetch_home_to_foreign(self) -> float:
        ...
