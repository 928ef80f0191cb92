"""Application-level DTOs for portfolio use cases."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Sequence

from portfolio_tracker.domain.results import PeriodChange, SeriesPoint


@dataclass(slots=True, frozen=True)
class EntryRequest:
    asset: str
    entry_date: date
    amount: str | float


@dataclass(slots=True, frozen=True)
class GrowthResponse:
    series: Sequence[SeriesPoint]
    changes: Sequence[PeriodChange]
    growth: float


@dataclass(slots=True, frozen=True)
class ImportResponse:
    imported: int
    skipped_assets: Sequence[str]
