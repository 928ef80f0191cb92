"""Composition root wiring settings, storage and the rate source together."""
from __future__ import annotations

from portfolio_tracker.application.use_cases import PortfolioContext
from portfolio_tracker.config import Settings
from portfolio_tracker.domain.models import ExchangeRate
from portfolio_tracker.domain.rates import RateProvider
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.domain.store import EntryStore
from portfolio_tracker.infrastructure.rates.open_er_api import OpenErApiRateSource
from portfolio_tracker.infrastructure.storage.catalog_store import load_catalog
from portfolio_tracker.infrastructure.storage.rate_cache import JsonRateCache
from portfolio_tracker.infrastructure.storage.snapshot_store import JsonSnapshotRepository


def build_context(settings: Settings) -> PortfolioContext:
    catalog = load_catalog(settings.catalog_path)
    store = EntryStore.load(catalog, JsonSnapshotRepository(settings.snapshot_path))
    rate_provider = RateProvider(
        source=OpenErApiRateSource(
            url=settings.rate_url,
            foreign_currency=settings.foreign_currency,
            timeout=settings.request_timeout,
            home_currency=settings.home_currency,
        ),
        cache=JsonRateCache(settings.rate_cache_path),
        default=ExchangeRate.from_home_to_foreign(settings.default_home_to_foreign),
    )
    return PortfolioContext(store=store, rate_provider=rate_provider, valuator=PortfolioValuator(store))
