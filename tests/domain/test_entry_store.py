import math
from datetime import date, datetime

import pytest

from portfolio_tracker.config import DEFAULT_ASSETS
from portfolio_tracker.domain.models import AssetCatalog, Entry
from portfolio_tracker.domain.store import EntryStore
from portfolio_tracker.errors import InvalidAssetError, InvalidDateError, InvalidValueError, PersistenceError


class RecordingRepository:
    def __init__(self, initial=None, fail_on_save: bool = False) -> None:
        self.initial = initial or {}
        self.fail_on_save = fail_on_save
        self.saved = []

    def load(self):
        return self.initial

    def save(self, entries) -> None:
        if self.fail_on_save:
            raise PersistenceError("disk full")
        self.saved.append(entries)


def make_store(repository=None) -> EntryStore:
    return EntryStore(AssetCatalog(DEFAULT_ASSETS), repository)


def test_write_then_read():
    store = make_store()
    store.set_value("UK ISA", date(2024, 1, 1), 1000.0)

    assert store.get_value("UK ISA", date(2024, 1, 1)) == 1000.0
    assert store.get_value("UK ISA", date(2024, 2, 1)) is None


def test_second_write_for_same_date_overwrites():
    store = make_store()
    store.set_value("UK ISA", date(2024, 1, 1), 1000.0)
    store.set_value("UK ISA", date(2024, 1, 1), 1500.0)

    assert store.get_value("UK ISA", date(2024, 1, 1)) == 1500.0
    assert len(store.all_entries("UK ISA")) == 1


def test_latest_value_is_max_date():
    store = make_store()
    store.set_value("India MF", date(2024, 3, 1), 300.0)
    store.set_value("India MF", date(2024, 1, 1), 100.0)
    store.set_value("India MF", date(2024, 2, 1), 200.0)

    latest = store.latest_value("India MF")

    assert latest == Entry(asset="India MF", entry_date=date(2024, 3, 1), value=300.0)
    assert store.previous_value("India MF").value == 200.0
    assert [e.entry_date for e in store.all_entries("India MF")] == [
        date(2024, 1, 1),
        date(2024, 2, 1),
        date(2024, 3, 1),
    ]


def test_asset_without_entries_has_no_latest_value():
    store = make_store()

    assert store.latest_value("UK Coinbase") is None
    assert store.previous_value("UK Coinbase") is None
    assert store.all_entries("UK Coinbase") == []


def test_all_known_dates_is_union_across_assets():
    store = make_store()
    store.set_value("UK ISA", date(2024, 1, 1), 1.0)
    store.set_value("India Shares", date(2024, 1, 15), 2.0)
    store.set_value("India Shares", date(2024, 1, 1), 3.0)

    assert store.all_known_dates() == {date(2024, 1, 1), date(2024, 1, 15)}


def test_value_as_of_uses_latest_prior_entry():
    store = make_store()
    store.set_value("UK ISA", date(2024, 1, 1), 100.0)
    store.set_value("UK ISA", date(2024, 3, 1), 300.0)

    assert store.value_as_of("UK ISA", date(2023, 12, 31)) is None
    assert store.value_as_of("UK ISA", date(2024, 2, 15)) == 100.0
    assert store.value_as_of("UK ISA", date(2024, 3, 1)) == 300.0


def test_unknown_asset_is_rejected_without_mutation():
    repo = RecordingRepository()
    store = make_store(repo)

    with pytest.raises(InvalidAssetError):
        store.set_value("Premium Bonds", date(2024, 1, 1), 10.0)

    assert store.snapshot() == {}
    assert repo.saved == []


@pytest.mark.parametrize("value", [math.nan, math.inf, -1.0, "100", None, True])
def test_invalid_values_are_rejected(value):
    store = make_store()

    with pytest.raises(InvalidValueError):
        store.set_value("UK ISA", date(2024, 1, 1), value)

    assert store.get_value("UK ISA", date(2024, 1, 1)) is None


def test_datetime_is_not_a_calendar_date():
    store = make_store()

    with pytest.raises(InvalidDateError):
        store.set_value("UK ISA", datetime(2024, 1, 1, 12, 0), 1.0)


def test_every_mutation_persists_full_snapshot():
    repo = RecordingRepository()
    store = make_store(repo)

    store.set_value("UK ISA", date(2024, 1, 1), 1000.0)
    store.set_value("India Shares", date(2024, 1, 1), 50000.0)

    assert len(repo.saved) == 2
    assert repo.saved[-1] == {
        "UK ISA": {date(2024, 1, 1): 1000.0},
        "India Shares": {date(2024, 1, 1): 50000.0},
    }


def test_persistence_failure_keeps_in_memory_state():
    store = make_store(RecordingRepository(fail_on_save=True))

    store.set_value("UK ISA", date(2024, 1, 1), 1000.0)

    assert store.get_value("UK ISA", date(2024, 1, 1)) == 1000.0


def test_remove_value():
    repo = RecordingRepository()
    store = make_store(repo)
    store.set_value("UK ISA", date(2024, 1, 1), 1000.0)

    assert store.remove_value("UK ISA", date(2024, 1, 1)) is True
    assert store.remove_value("UK ISA", date(2024, 1, 1)) is False
    assert store.latest_value("UK ISA") is None
    assert repo.saved[-1] == {}


def test_import_entries_validates_everything_before_mutating():
    repo = RecordingRepository()
    store = make_store(repo)
    entries = [
        Entry("UK ISA", date(2024, 1, 1), 10.0),
        Entry("UK ISA", date(2024, 2, 1), -5.0),
    ]

    with pytest.raises(InvalidValueError):
        store.import_entries(entries)

    assert store.snapshot() == {}
    assert repo.saved == []


def test_import_entries_persists_once():
    repo = RecordingRepository()
    store = make_store(repo)

    count = store.import_entries(
        [Entry("UK ISA", date(2024, 1, 1), 10.0), Entry("India MF", date(2024, 1, 1), 20.0)]
    )

    assert count == 2
    assert len(repo.saved) == 1


def test_load_skips_unknown_assets_and_bad_values():
    repo = RecordingRepository(
        initial={
            "UK ISA": {date(2024, 1, 1): 1000.0, date(2024, 2, 1): "oops"},
            "Old Account": {date(2024, 1, 1): 5.0},
        }
    )

    store = EntryStore.load(AssetCatalog(DEFAULT_ASSETS), repo)

    assert store.snapshot() == {"UK ISA": {date(2024, 1, 1): 1000.0}}
    assert store.retained_assets() == ["Old Account", "UK ISA"]


def test_entries_kept_aside_are_written_back():
    repo = RecordingRepository(
        initial={
            "UK ISA": {date(2024, 1, 1): 1000.0, date(2024, 2, 1): "oops"},
            "Old Account": {date(2024, 1, 1): 5.0},
        }
    )
    store = EntryStore.load(AssetCatalog(DEFAULT_ASSETS), repo)

    store.set_value("UK ISA", date(2024, 3, 1), 1100.0)

    assert repo.saved[-1] == {
        "UK ISA": {date(2024, 1, 1): 1000.0, date(2024, 2, 1): "oops", date(2024, 3, 1): 1100.0},
        "Old Account": {date(2024, 1, 1): 5.0},
    }
    assert store.all_known_dates() == {date(2024, 1, 1), date(2024, 3, 1)}


def test_new_value_replaces_entry_kept_aside():
    repo = RecordingRepository(initial={"UK ISA": {date(2024, 2, 1): "oops"}})
    store = EntryStore.load(AssetCatalog(DEFAULT_ASSETS), repo)

    store.set_value("UK ISA", date(2024, 2, 1), 50.0)

    assert repo.saved[-1] == {"UK ISA": {date(2024, 2, 1): 50.0}}
    assert store.retained_assets() == []


def test_remove_value_drops_entry_kept_aside():
    repo = RecordingRepository(initial={"UK ISA": {date(2024, 2, 1): -3.0}})
    store = EntryStore.load(AssetCatalog(DEFAULT_ASSETS), repo)

    assert store.remove_value("UK ISA", date(2024, 2, 1)) is True
    assert repo.saved[-1] == {}


def test_load_survives_unreadable_snapshot():
    class BrokenRepository(RecordingRepository):
        def load(self):
            raise PersistenceError("corrupt")

    store = EntryStore.load(AssetCatalog(DEFAULT_ASSETS), BrokenRepository())

    assert store.snapshot() == {}
