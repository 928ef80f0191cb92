"""Valuation results produced by the domain services."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence

from .models import AssetCategory, ExchangeRate


@dataclass(frozen=True)
class SeriesPoint:
    point_date: date
    value: float


@dataclass(frozen=True)
class PeriodChange:
    label: str
    delta: float
    percent_delta: float


@dataclass(frozen=True)
class AssetValuation:
    name: str
    category: AssetCategory
    latest_date: date | None
    native_value: float
    base_value: float
    change: float


@dataclass(frozen=True)
class CategoryValuation:
    category: AssetCategory
    total: float
    change: float
    assets: Sequence[AssetValuation] = field(default_factory=tuple)


@dataclass(frozen=True)
class PortfolioSummary:
    overall_total: float
    categories: Sequence[CategoryValuation]
    rate: ExchangeRate
    generated_at: datetime

    def category(self, category: AssetCategory) -> CategoryValuation:
        for valuation in self.categories:
            if valuation.category is category:
                return valuation
        raise KeyError(category)

    def iter_assets(self) -> Iterable[AssetValuation]:
        for valuation in self.categories:
            yield from valuation.assets
