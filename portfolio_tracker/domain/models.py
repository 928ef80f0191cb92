"""Domain models for the portfolio tracker.

Assets belong to a closed catalogue; each asset is valued either in the home
currency or in the foreign currency and converted with an ``ExchangeRate``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Iterator

from portfolio_tracker.errors import ConfigurationError, InvalidAssetError, InvalidRateError

RATE_TOLERANCE = 1e-9


class AssetCategory(str, Enum):
    HOME = "home"
    FOREIGN = "foreign"


@dataclass(frozen=True)
class AssetDefinition:
    """A manually tracked holding and the currency domain it is valued in."""

    name: str
    category: AssetCategory

    @property
    def is_foreign(self) -> bool:
        return self.category is AssetCategory.FOREIGN


class AssetCatalog:
    """Closed, ordered set of configured assets keyed by name."""

    def __init__(self, definitions: Iterable[AssetDefinition]) -> None:
        self._definitions: dict[str, AssetDefinition] = {}
        for definition in definitions:
            if definition.name in self._definitions:
                raise ConfigurationError(f"Duplicate asset name in catalogue: {definition.name!r}")
            self._definitions[definition.name] = definition

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[AssetDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def names(self) -> list[str]:
        return list(self._definitions)

    def get(self, name: str) -> AssetDefinition | None:
        return self._definitions.get(name)

    def require(self, name: str) -> AssetDefinition:
        definition = self._definitions.get(name)
        if definition is None:
            raise InvalidAssetError(name)
        return definition

    def in_category(self, category: AssetCategory) -> list[AssetDefinition]:
        return [d for d in self._definitions.values() if d.category is category]


@dataclass(frozen=True)
class Entry:
    """One recorded value for one asset on one calendar day, in the asset's own currency."""

    asset: str
    entry_date: date
    value: float


@dataclass(frozen=True)
class ExchangeRate:
    """Conversion between the home and foreign currency.

    ``foreign_to_home`` is the number of home units per foreign unit and
    ``home_to_foreign`` its reciprocal. Build instances through the
    ``from_*`` constructors so the pair always stays consistent.
    """

    foreign_to_home: float
    home_to_foreign: float
    last_updated: datetime | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for value in (self.foreign_to_home, self.home_to_foreign):
            if not _is_positive_finite(value):
                raise InvalidRateError(f"Exchange rate must be a positive finite number, got {value!r}")
        if abs(self.foreign_to_home * self.home_to_foreign - 1.0) > RATE_TOLERANCE:
            raise InvalidRateError(
                f"Rates {self.foreign_to_home} and {self.home_to_foreign} are not reciprocal"
            )

    @classmethod
    def from_home_to_foreign(cls, rate: float, last_updated: datetime | None = None) -> ExchangeRate:
        if not _is_positive_finite(rate):
            raise InvalidRateError(f"Exchange rate must be a positive finite number, got {rate!r}")
        return cls(foreign_to_home=1.0 / rate, home_to_foreign=float(rate), last_updated=last_updated)

    @classmethod
    def from_foreign_to_home(cls, rate: float, last_updated: datetime | None = None) -> ExchangeRate:
        if not _is_positive_finite(rate):
            raise InvalidRateError(f"Exchange rate must be a positive finite number, got {rate!r}")
        return cls(foreign_to_home=float(rate), home_to_foreign=1.0 / rate, last_updated=last_updated)

    def is_stale(self, today: date) -> bool:
        if self.last_updated is None:
            return True
        return self.last_updated.date() != today


def _is_positive_finite(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0
