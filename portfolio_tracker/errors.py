"""Exception hierarchy for the portfolio tracker."""
from __future__ import annotations


class PortfolioError(Exception):
    """Base exception for all portfolio tracker errors."""


class ConfigurationError(PortfolioError):
    """Raised when the asset catalogue or settings are inconsistent."""


class InvalidInputError(PortfolioError):
    """Raised when a single user input is rejected; state is left untouched."""


class InvalidAssetError(InvalidInputError):
    def __init__(self, asset: object) -> None:
        super().__init__(f"Unknown asset: {asset!r}")
        self.asset = asset


class InvalidValueError(InvalidInputError):
    """Raised for non-numeric, non-finite or negative amounts."""


class InvalidDateError(InvalidInputError):
    """Raised when a date string matches none of the accepted formats."""


class InvalidRateError(InvalidInputError):
    """Raised when an exchange rate is not a positive finite number."""


class PersistenceError(PortfolioError):
    """Raised by storage adapters when a read or write fails."""


class RateFetchError(PortfolioError):
    """Raised by rate sources on network, HTTP or decode failures."""
