"""Application services orchestrating the portfolio workflows."""
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path

from portfolio_tracker.application.dto import EntryRequest, GrowthResponse, ImportResponse
from portfolio_tracker.domain.rates import RateProvider, RefreshOutcome
from portfolio_tracker.domain.results import PortfolioSummary
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.domain.store import EntryStore
from portfolio_tracker.infrastructure.parsing.history import history_to_entries
from portfolio_tracker.infrastructure.parsing.utils import parse_amount

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PortfolioContext:
    store: EntryStore
    rate_provider: RateProvider
    valuator: PortfolioValuator


class RecordEntryUseCase:
    def __init__(self, context: PortfolioContext) -> None:
        self._context = context

    def execute(self, request: EntryRequest) -> float:
        value = parse_amount(request.amount)
        self._context.store.set_value(request.asset, request.entry_date, value)
        logger.info("Recorded %s for %s on %s", value, request.asset, request.entry_date)
        return value


class SummarizePortfolioUseCase:
    def __init__(self, context: PortfolioContext) -> None:
        self._context = context

    def execute(self) -> PortfolioSummary:
        rate = self._context.rate_provider.current_rate()
        return self._context.valuator.summarize(rate)


class PortfolioGrowthUseCase:
    def __init__(self, context: PortfolioContext) -> None:
        self._context = context

    def execute(self, forward_fill: bool = False) -> GrowthResponse:
        valuator = self._context.valuator
        rate = self._context.rate_provider.current_rate()
        series = valuator.total_series(rate, forward_fill=forward_fill)
        return GrowthResponse(
            series=tuple(series),
            changes=tuple(valuator.period_changes(series)),
            growth=valuator.growth_over(series),
        )


class ImportHistoryUseCase:
    def __init__(self, context: PortfolioContext) -> None:
        self._context = context

    def execute(self, source: BytesIO | Path | bytes, excel: bool | None = None) -> ImportResponse:
        store = self._context.store
        parsed = history_to_entries(source, store.catalog, excel=excel)
        imported = store.import_entries(parsed.entries)
        return ImportResponse(imported=imported, skipped_assets=tuple(parsed.unknown_assets))


class RefreshRateUseCase:
    def __init__(self, context: PortfolioContext) -> None:
        self._context = context

    def execute(self, force: bool = False) -> RefreshOutcome | None:
        provider = self._context.rate_provider
        if not force and not provider.needs_refresh():
            logger.debug("Exchange rate is current; skipping refresh")
            return None
        return provider.refresh()

    def execute_in_background(self, force: bool = False) -> Future[RefreshOutcome] | None:
        provider = self._context.rate_provider
        if not force and not provider.needs_refresh():
            return None
        if provider.is_loading:
            logger.debug("Exchange rate refresh already running")
            return None
        return provider.refresh_in_background()
