from datetime import date

import pytest

from portfolio_tracker.config import DEFAULT_ASSETS
from portfolio_tracker.domain.models import AssetCatalog, AssetCategory, ExchangeRate
from portfolio_tracker.domain.results import SeriesPoint
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.domain.store import EntryStore

RATE = ExchangeRate.from_foreign_to_home(1 / 100)


def make_valuator(entries: dict) -> PortfolioValuator:
    store = EntryStore(AssetCatalog(DEFAULT_ASSETS))
    for asset, values in entries.items():
        for entry_date, value in values.items():
            store.set_value(asset, entry_date, value)
    return PortfolioValuator(store)


def test_end_to_end_totals():
    valuator = make_valuator(
        {
            "UK ISA": {date(2024, 1, 1): 1000},
            "India Shares": {date(2024, 1, 1): 50000},
        }
    )

    assert valuator.category_total(AssetCategory.HOME, RATE) == 1000
    assert valuator.category_total(AssetCategory.FOREIGN, RATE) == pytest.approx(500)
    assert valuator.overall_total(RATE) == pytest.approx(1500)


def test_latest_value_in_base_uses_latest_entry_and_converts_foreign():
    valuator = make_valuator(
        {
            "India MF": {date(2024, 1, 1): 10000, date(2024, 2, 1): 20000},
            "UK Invest": {date(2024, 1, 1): 700},
        }
    )

    assert valuator.latest_value_in_base("India MF", RATE) == pytest.approx(200)
    assert valuator.latest_value_in_base("UK Invest", RATE) == 700
    assert valuator.latest_value_in_base("UK Coinbase", RATE) == 0.0


def test_overall_total_is_sum_of_categories():
    valuator = make_valuator(
        {
            "UK ISA": {date(2024, 1, 1): 1234.5},
            "UK Cash ISA": {date(2024, 3, 1): 99.0},
            "India Smallcase": {date(2024, 2, 1): 7777.0},
        }
    )
    rate = ExchangeRate.from_home_to_foreign(104.5)

    expected = valuator.category_total(AssetCategory.HOME, rate) + valuator.category_total(
        AssetCategory.FOREIGN, rate
    )
    assert valuator.overall_total(rate) == pytest.approx(expected)


def test_empty_store_totals_are_zero():
    valuator = make_valuator({})

    assert valuator.overall_total(RATE) == 0.0
    assert valuator.total_series(RATE) == []


def test_total_series_only_counts_exact_date_entries():
    valuator = make_valuator(
        {
            "UK ISA": {date(2024, 1, 1): 1000, date(2024, 2, 1): 1100},
            "India Shares": {date(2024, 1, 1): 50000, date(2024, 1, 15): 60000},
        }
    )

    series = valuator.total_series(RATE)

    assert [p.point_date for p in series] == [date(2024, 1, 1), date(2024, 1, 15), date(2024, 2, 1)]
    assert [p.value for p in series] == pytest.approx([1500, 600, 1100])


def test_total_series_forward_fill_carries_last_value():
    valuator = make_valuator(
        {
            "UK ISA": {date(2024, 1, 1): 1000, date(2024, 2, 1): 1100},
            "India Shares": {date(2024, 1, 1): 50000, date(2024, 1, 15): 60000},
        }
    )

    series = valuator.total_series(RATE, forward_fill=True)

    assert [p.value for p in series] == pytest.approx([1500, 1600, 1700])


def test_period_changes_single_point_is_empty():
    assert PortfolioValuator.period_changes([SeriesPoint(date(2024, 1, 1), 100.0)]) == []
    assert PortfolioValuator.period_changes([]) == []


def test_period_changes_two_points():
    series = [SeriesPoint(date(2024, 1, 1), 100.0), SeriesPoint(date(2024, 2, 1), 150.0)]

    changes = PortfolioValuator.period_changes(series, label=lambda p: p.point_date.strftime("%b"))

    assert len(changes) == 1
    assert changes[0].label == "Feb"
    assert changes[0].delta == 50
    assert changes[0].percent_delta == 50.0


def test_period_changes_default_label_and_zero_guard():
    series = [
        SeriesPoint(date(2024, 1, 1), 0.0),
        SeriesPoint(date(2024, 2, 1), 200.0),
        SeriesPoint(date(2024, 3, 1), 100.0),
    ]

    changes = PortfolioValuator.period_changes(series)

    assert [c.label for c in changes] == ["1 Feb 2024", "1 Mar 2024"]
    assert changes[0].percent_delta == 0.0
    assert changes[1].delta == -100.0
    assert changes[1].percent_delta == -50.0


def test_growth_over_series():
    series = [SeriesPoint(date(2024, 1, 1), 100.0), SeriesPoint(date(2024, 6, 1), 180.0)]

    assert PortfolioValuator.growth_over(series) == 80.0
    assert PortfolioValuator.growth_over(series[:1]) == 0.0


def test_asset_change_between_last_two_entries():
    valuator = make_valuator({"India Shares": {date(2024, 1, 1): 40000, date(2024, 2, 1): 50000}})

    assert valuator.asset_change("India Shares", RATE) == pytest.approx(100)
    assert valuator.asset_change("UK ISA", RATE) == 0.0


def test_summarize_groups_assets_by_category():
    valuator = make_valuator(
        {
            "UK ISA": {date(2024, 1, 1): 1000},
            "India Shares": {date(2024, 1, 1): 50000},
        }
    )

    summary = valuator.summarize(RATE)

    assert summary.overall_total == pytest.approx(1500)
    assert summary.category(AssetCategory.HOME).total == 1000
    assert summary.category(AssetCategory.FOREIGN).total == pytest.approx(500)
    isa = next(a for a in summary.iter_assets() if a.name == "UK ISA")
    assert isa.latest_date == date(2024, 1, 1)
    assert len(list(summary.iter_assets())) == len(DEFAULT_ASSETS)


def test_to_foreign_uses_reciprocal_rate():
    rate = ExchangeRate.from_home_to_foreign(104.5)

    assert PortfolioValuator.to_foreign(10, rate) == pytest.approx(1045)
