"""In-memory entry store backed by a whole-snapshot repository."""
from __future__ import annotations

import logging
import math
import numbers
from datetime import date, datetime
from typing import Any, Iterable

from portfolio_tracker.errors import InvalidDateError, InvalidValueError, PersistenceError

from .models import AssetCatalog, Entry
from .repositories import EntrySnapshotRepository

logger = logging.getLogger(__name__)


class EntryStore:
    """Maps asset name -> (date -> value) for the assets of a closed catalogue.

    Every mutation rewrites the full snapshot through the repository. Write
    failures are logged and the in-memory state stays authoritative.

    Snapshot entries that cannot be valued (unknown assets, invalid values)
    are kept aside and written back unchanged, so a catalogue edit never
    deletes saved history.
    """

    def __init__(
        self,
        catalog: AssetCatalog,
        repository: EntrySnapshotRepository | None = None,
    ) -> None:
        self._catalog = catalog
        self._repository = repository
        self._entries: dict[str, dict[date, float]] = {}
        self._retained: dict[str, dict[date, Any]] = {}

    @classmethod
    def load(cls, catalog: AssetCatalog, repository: EntrySnapshotRepository) -> EntryStore:
        store = cls(catalog, repository)
        try:
            raw = repository.load()
        except PersistenceError as exc:
            logger.error("Could not load portfolio snapshot, starting empty: %s", exc)
            return store
        for asset, values in raw.items():
            if asset not in catalog:
                logger.warning("Keeping entries for unknown asset %r aside", asset)
                store._retained[asset] = dict(values)
                continue
            for entry_date, value in values.items():
                try:
                    store._entries.setdefault(asset, {})[entry_date] = _validate_value(value)
                except InvalidValueError as exc:
                    logger.warning("Keeping %s on %s aside: %s", asset, entry_date, exc)
                    store._retained.setdefault(asset, {})[entry_date] = value
        logger.info("Loaded %d entries for %d assets", store.entry_count(), len(store._entries))
        return store

    @property
    def catalog(self) -> AssetCatalog:
        return self._catalog

    def set_value(self, asset: str, entry_date: date, value: float) -> None:
        self._catalog.require(asset)
        _validate_date(entry_date)
        checked = _validate_value(value)
        self._entries.setdefault(asset, {})[entry_date] = checked
        self._release(asset, entry_date)
        logger.debug("Set %s on %s to %s", asset, entry_date, checked)
        self._persist()

    def remove_value(self, asset: str, entry_date: date) -> bool:
        self._catalog.require(asset)
        released = self._release(asset, entry_date)
        values = self._entries.get(asset)
        if not values or entry_date not in values:
            if released:
                self._persist()
            return released
        del values[entry_date]
        if not values:
            del self._entries[asset]
        self._persist()
        return True

    def import_entries(self, entries: Iterable[Entry]) -> int:
        """Validate every entry first, then merge them in and persist once."""
        checked: list[tuple[str, date, float]] = []
        for entry in entries:
            self._catalog.require(entry.asset)
            _validate_date(entry.entry_date)
            checked.append((entry.asset, entry.entry_date, _validate_value(entry.value)))
        for asset, entry_date, value in checked:
            self._entries.setdefault(asset, {})[entry_date] = value
            self._release(asset, entry_date)
        if checked:
            self._persist()
        return len(checked)

    def get_value(self, asset: str, entry_date: date) -> float | None:
        return self._entries.get(asset, {}).get(entry_date)

    def latest_value(self, asset: str) -> Entry | None:
        values = self._entries.get(asset)
        if not values:
            return None
        latest = max(values)
        return Entry(asset=asset, entry_date=latest, value=values[latest])

    def previous_value(self, asset: str) -> Entry | None:
        entries = self.all_entries(asset)
        if len(entries) < 2:
            return None
        return entries[-2]

    def value_as_of(self, asset: str, as_of: date) -> float | None:
        values = self._entries.get(asset, {})
        candidates = [d for d in values if d <= as_of]
        if not candidates:
            return None
        return values[max(candidates)]

    def all_entries(self, asset: str) -> list[Entry]:
        values = self._entries.get(asset, {})
        return [Entry(asset=asset, entry_date=d, value=values[d]) for d in sorted(values)]

    def all_known_dates(self) -> set[date]:
        dates: set[date] = set()
        for values in self._entries.values():
            dates.update(values)
        return dates

    def entry_count(self) -> int:
        return sum(len(values) for values in self._entries.values())

    def snapshot(self) -> dict[str, dict[date, float]]:
        return {asset: dict(values) for asset, values in self._entries.items()}

    def retained_assets(self) -> list[str]:
        """Names with saved entries that are not valued, e.g. assets missing from the catalogue."""
        return sorted(self._retained)

    def _release(self, asset: str, entry_date: date) -> bool:
        retained = self._retained.get(asset)
        if not retained or entry_date not in retained:
            return False
        del retained[entry_date]
        if not retained:
            del self._retained[asset]
        return True

    def _persisted_snapshot(self) -> dict[str, dict[date, Any]]:
        merged = {asset: dict(values) for asset, values in self._retained.items()}
        for asset, values in self._entries.items():
            merged.setdefault(asset, {}).update(values)
        return merged

    def _persist(self) -> None:
        if self._repository is None:
            return
        try:
            self._repository.save(self._persisted_snapshot())
        except PersistenceError as exc:
            logger.error("Failed to persist portfolio snapshot: %s", exc)


def _validate_value(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidValueError(f"Value must be a number, got {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise InvalidValueError(f"Value must be finite, got {value!r}")
    if result < 0:
        raise InvalidValueError(f"Value must not be negative, got {value!r}")
    return result


def _validate_date(entry_date: object) -> None:
    if not isinstance(entry_date, date) or isinstance(entry_date, datetime):
        raise InvalidDateError(f"Entry date must be a calendar date, got {entry_date!r}")
