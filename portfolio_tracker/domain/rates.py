"""Exchange rate provider with cached fallback."""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable

from portfolio_tracker.errors import InvalidRateError, PersistenceError, RateFetchError

from .models import ExchangeRate
from .repositories import RateCache, RateSource

logger = logging.getLogger(__name__)

DEFAULT_HOME_TO_FOREIGN = 104.5

RateListener = Callable[[ExchangeRate], None]


@dataclass(frozen=True)
class RefreshOutcome:
    success: bool
    rate: ExchangeRate
    error: str | None = None


class RateProvider:
    """Holds the current exchange rate and refreshes it from a ``RateSource``.

    The rate is published as a single immutable ``ExchangeRate`` so readers
    always see a consistent pair. A failed refresh leaves the previous rate
    in place and records ``error_message`` for display.
    """

    def __init__(
        self,
        source: RateSource,
        cache: RateCache | None = None,
        default: ExchangeRate | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._source = source
        self._cache = cache
        self._clock = clock
        self._rate = default or ExchangeRate.from_home_to_foreign(DEFAULT_HOME_TO_FOREIGN)
        self._listeners: list[RateListener] = []
        self._executor: Executor | None = None
        self.error_message: str | None = None
        self.is_loading = False
        self._load_cached()

    def current_rate(self) -> ExchangeRate:
        return self._rate

    def needs_refresh(self, today: date | None = None) -> bool:
        return self._rate.is_stale(today or self._clock().date())

    def add_listener(self, listener: RateListener) -> None:
        self._listeners.append(listener)

    def refresh(self) -> RefreshOutcome:
        self.is_loading = True
        self.error_message = None
        try:
            value = self._source.fetch_home_to_foreign()
            rate = ExchangeRate.from_home_to_foreign(value, last_updated=self._clock())
        except (RateFetchError, InvalidRateError) as exc:
            self.error_message = f"Failed to fetch exchange rates: {exc}"
            logger.warning("Exchange rate refresh failed: %s", exc)
            return RefreshOutcome(success=False, rate=self._rate, error=self.error_message)
        finally:
            self.is_loading = False

        self._rate = rate
        logger.info("Updated exchange rate: 1 home unit = %s foreign units", rate.home_to_foreign)
        self._store_cache(rate)
        for listener in list(self._listeners):
            try:
                listener(rate)
            except Exception:
                logger.exception("Exchange rate listener %r failed", listener)
        return RefreshOutcome(success=True, rate=rate)

    def refresh_in_background(self, executor: Executor | None = None) -> Future[RefreshOutcome]:
        """Run ``refresh`` on a worker thread; the latest completion wins.

        ``is_loading`` is set before this returns, so callers can show progress
        until the returned future completes.
        """
        if executor is None:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rate-refresh")
            executor = self._executor
        self.is_loading = True
        return executor.submit(self.refresh)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _load_cached(self) -> None:
        if self._cache is None:
            return
        try:
            cached = self._cache.load()
        except PersistenceError as exc:
            logger.warning("Ignoring unreadable exchange rate cache: %s", exc)
            return
        if cached is not None:
            self._rate = cached
            logger.debug("Loaded cached exchange rate %s", cached.home_to_foreign)

    def _store_cache(self, rate: ExchangeRate) -> None:
        if self._cache is None:
            return
        try:
            self._cache.save(rate)
        except PersistenceError as exc:
            logger.error("Failed to cache exchange rate: %s", exc)
