"""Domain services computing valuations over the entry store."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from .dates import format_entry_date
from .models import AssetCategory, AssetDefinition, ExchangeRate
from .results import AssetValuation, CategoryValuation, PeriodChange, PortfolioSummary, SeriesPoint
from .store import EntryStore

LabelFormatter = Callable[[SeriesPoint], str]


def _date_label(point: SeriesPoint) -> str:
    return format_entry_date(point.point_date)


class PortfolioValuator:
    """Latest values, category totals and growth series in the home currency.

    Assets without entries are worth zero. Nothing is rounded here.
    """

    def __init__(self, store: EntryStore) -> None:
        self._store = store

    def to_base(self, asset: AssetDefinition, value: float, rate: ExchangeRate) -> float:
        if asset.is_foreign:
            return value * rate.foreign_to_home
        return value

    @staticmethod
    def to_foreign(amount: float, rate: ExchangeRate) -> float:
        return amount * rate.home_to_foreign

    def latest_value_in_base(self, asset: str, rate: ExchangeRate) -> float:
        definition = self._store.catalog.require(asset)
        latest = self._store.latest_value(asset)
        if latest is None:
            return 0.0
        return self.to_base(definition, latest.value, rate)

    def asset_change(self, asset: str, rate: ExchangeRate) -> float:
        definition = self._store.catalog.require(asset)
        latest = self._store.latest_value(asset)
        previous = self._store.previous_value(asset)
        if latest is None or previous is None:
            return 0.0
        return self.to_base(definition, latest.value - previous.value, rate)

    def category_total(self, category: AssetCategory, rate: ExchangeRate) -> float:
        total = 0.0
        for definition in self._store.catalog.in_category(category):
            total += self.latest_value_in_base(definition.name, rate)
        return total

    def overall_total(self, rate: ExchangeRate) -> float:
        return sum(self.category_total(category, rate) for category in AssetCategory)

    def total_series(self, rate: ExchangeRate, forward_fill: bool = False) -> list[SeriesPoint]:
        """Total base value for every known date, ascending.

        By default only entries dated exactly on a day count towards that
        day's total. With ``forward_fill`` each asset contributes its latest
        value as of that day instead.
        """
        points: list[SeriesPoint] = []
        for point_date in sorted(self._store.all_known_dates()):
            total = 0.0
            for definition in self._store.catalog:
                if forward_fill:
                    value = self._store.value_as_of(definition.name, point_date)
                else:
                    value = self._store.get_value(definition.name, point_date)
                if value is not None:
                    total += self.to_base(definition, value, rate)
            points.append(SeriesPoint(point_date=point_date, value=total))
        return points

    @staticmethod
    def period_changes(
        series: Sequence[SeriesPoint],
        label: LabelFormatter = _date_label,
    ) -> list[PeriodChange]:
        changes: list[PeriodChange] = []
        for previous, current in zip(series, series[1:]):
            delta = current.value - previous.value
            percent = delta / previous.value * 100 if previous.value > 0 else 0.0
            changes.append(PeriodChange(label=label(current), delta=delta, percent_delta=percent))
        return changes

    @staticmethod
    def growth_over(series: Sequence[SeriesPoint]) -> float:
        if len(series) < 2:
            return 0.0
        return series[-1].value - series[0].value

    def summarize(self, rate: ExchangeRate) -> PortfolioSummary:
        categories: list[CategoryValuation] = []
        for category in AssetCategory:
            assets: list[AssetValuation] = []
            for definition in self._store.catalog.in_category(category):
                latest = self._store.latest_value(definition.name)
                assets.append(
                    AssetValuation(
                        name=definition.name,
                        category=category,
                        latest_date=latest.entry_date if latest else None,
                        native_value=latest.value if latest else 0.0,
                        base_value=self.latest_value_in_base(definition.name, rate),
                        change=self.asset_change(definition.name, rate),
                    )
                )
            categories.append(
                CategoryValuation(
                    category=category,
                    total=sum(a.base_value for a in assets),
                    change=sum(a.change for a in assets),
                    assets=tuple(assets),
                )
            )
        return PortfolioSummary(
            overall_total=sum(c.total for c in categories),
            categories=tuple(categories),
            rate=rate,
            generated_at=datetime.now(),
        )
