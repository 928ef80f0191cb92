from datetime import date, datetime

import pytest

from portfolio_tracker.domain.dates import format_entry_date, parse_entry_date
from portfolio_tracker.domain.models import AssetCatalog, AssetCategory, AssetDefinition, ExchangeRate
from portfolio_tracker.errors import ConfigurationError, InvalidAssetError, InvalidDateError, InvalidRateError


def test_exchange_rate_pair_is_reciprocal():
    rate = ExchangeRate.from_home_to_foreign(104.5)

    assert rate.foreign_to_home * rate.home_to_foreign == pytest.approx(1.0, abs=1e-9)
    assert ExchangeRate.from_foreign_to_home(0.01).home_to_foreign == pytest.approx(100.0)


@pytest.mark.parametrize("value", [0, -3.0, float("nan"), float("inf")])
def test_exchange_rate_rejects_invalid_values(value):
    with pytest.raises(InvalidRateError):
        ExchangeRate.from_home_to_foreign(value)


def test_exchange_rate_rejects_mismatched_pair():
    with pytest.raises(InvalidRateError):
        ExchangeRate(foreign_to_home=0.01, home_to_foreign=50.0)


def test_exchange_rate_staleness_uses_calendar_day():
    rate = ExchangeRate.from_home_to_foreign(100.0, last_updated=datetime(2024, 5, 15, 23, 59))

    assert not rate.is_stale(date(2024, 5, 15))
    assert rate.is_stale(date(2024, 5, 16))
    assert ExchangeRate.from_home_to_foreign(100.0).is_stale(date(2024, 5, 15))


def test_catalog_lookup_and_categories():
    catalog = AssetCatalog(
        [
            AssetDefinition("UK ISA", AssetCategory.HOME),
            AssetDefinition("India MF", AssetCategory.FOREIGN),
        ]
    )

    assert "UK ISA" in catalog
    assert "Premium Bonds" not in catalog
    assert catalog.require("India MF").is_foreign
    assert [d.name for d in catalog.in_category(AssetCategory.HOME)] == ["UK ISA"]
    with pytest.raises(InvalidAssetError):
        catalog.require("Premium Bonds")


def test_catalog_rejects_duplicate_names():
    with pytest.raises(ConfigurationError):
        AssetCatalog([AssetDefinition("UK ISA", AssetCategory.HOME), AssetDefinition("UK ISA", AssetCategory.FOREIGN)])


def test_entry_date_format_is_stable():
    assert format_entry_date(date(2024, 1, 1)) == "1 Jan 2024"
    assert format_entry_date(date(2024, 12, 25)) == "25 Dec 2024"
    assert parse_entry_date("1 Jan 2024") == date(2024, 1, 1)
    assert parse_entry_date(format_entry_date(date(2023, 9, 30))) == date(2023, 9, 30)


def test_entry_date_accepts_iso_and_month_keys():
    assert parse_entry_date("2024-02-29") == date(2024, 2, 29)
    assert parse_entry_date("Mar 25") == date(2025, 3, 1)
    assert parse_entry_date("01 feb 2024") == date(2024, 2, 1)


@pytest.mark.parametrize("text", ["", "31 Feb 2024", "1 Foo 2024", "2024/01/01", "yesterday"])
def test_entry_date_rejects_garbage(text):
    with pytest.raises(InvalidDateError):
        parse_entry_date(text)
