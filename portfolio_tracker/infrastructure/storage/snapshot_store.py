"""JSON file storage for the portfolio entry snapshot."""
from __future__ import annotations

import json
import logging
import os
import shutil
from datetime import date
from pathlib import Path
from typing import Any, Mapping

from portfolio_tracker.domain.dates import format_entry_date, parse_entry_date
from portfolio_tracker.errors import InvalidDateError, PersistenceError

logger = logging.getLogger(__name__)


def entries_to_json(entries: Mapping[str, Mapping[date, float]]) -> dict[str, dict[str, float]]:
    return {
        asset: {format_entry_date(entry_date): value for entry_date, value in sorted(values.items())}
        for asset, values in entries.items()
    }


def entries_from_json(raw: Any, unreadable: dict[str, Any] | None = None) -> dict[str, dict[date, float]]:
    """Parse ``{asset: {date text: value}}``.

    Entries whose date key cannot be parsed, and assets whose value is not an
    object, are skipped. When ``unreadable`` is given they are collected there
    in their raw JSON form.
    """
    if not isinstance(raw, dict):
        raise PersistenceError(f"Snapshot must be a JSON object, got {type(raw).__name__}")
    entries: dict[str, dict[date, float]] = {}
    for asset, values in raw.items():
        if not isinstance(values, dict):
            logger.warning("Ignoring malformed entries for %r", asset)
            if unreadable is not None:
                unreadable[str(asset)] = values
            continue
        parsed: dict[date, float] = {}
        for key, value in values.items():
            try:
                parsed[parse_entry_date(key)] = value
            except InvalidDateError as exc:
                logger.warning("Ignoring entry for %r: %s", asset, exc)
                if unreadable is not None:
                    unreadable.setdefault(str(asset), {})[key] = value
        entries[str(asset)] = parsed
    return entries


def merge_unreadable(payload: dict[str, Any], unreadable: Mapping[str, Any]) -> dict[str, Any]:
    """Put skipped raw entries back into a serialised snapshot; parsed entries win."""
    merged = dict(payload)
    for asset, raw in unreadable.items():
        current = merged.get(asset)
        if isinstance(raw, dict):
            combined = dict(raw)
            if isinstance(current, dict):
                combined.update(current)
            merged[asset] = combined
        elif current is None:
            merged[asset] = raw
    return merged


class JsonSnapshotRepository:
    """Reads and rewrites the whole ``{asset: {date: value}}`` file.

    Raw entries that ``load`` could not parse are written back by ``save``.
    An unreadable file is copied aside before the error is raised.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._unreadable: dict[str, Any] = {}

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, dict[date, float]]:
        if not self._path.exists():
            logger.info("No saved portfolio data found at %s", self._path)
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self._back_up()
            raise PersistenceError(f"Error loading portfolio data from {self._path}: {exc}") from exc
        unreadable: dict[str, Any] = {}
        try:
            entries = entries_from_json(raw, unreadable)
        except PersistenceError:
            self._back_up()
            raise
        self._unreadable = unreadable
        logger.info("Loaded portfolio data from %s", self._path)
        return entries

    def save(self, entries: Mapping[str, Mapping[date, float]]) -> None:
        document = merge_unreadable(entries_to_json(entries), self._unreadable)
        payload = json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise PersistenceError(f"Error saving portfolio data to {self._path}: {exc}") from exc
        logger.debug("Saved portfolio data to %s", self._path)

    def _back_up(self) -> None:
        backup = self._path.with_name(self._path.name + ".corrupt")
        try:
            shutil.copyfile(self._path, backup)
        except OSError as exc:
            logger.error("Could not back up unreadable portfolio data %s: %s", self._path, exc)
            return
        logger.warning("Copied unreadable portfolio data to %s", backup)
