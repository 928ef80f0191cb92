"""open.er-api.com rate source."""
from __future__ import annotations

import logging
import math

import requests

from portfolio_tracker.errors import RateFetchError

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://open.er-api.com/v6/latest/GBP"


class OpenErApiRateSource:
    """Fetches ``rates[<foreign>]`` from ``GET /v6/latest/<home>``.

    Response shape: ``{"result": "success", "base_code": "GBP", "rates": {"INR": 104.2, ...}}``.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        foreign_currency: str = "INR",
        timeout: float = 10.0,
        home_currency: str = "GBP",
    ) -> None:
        self._url = url
        self._home_currency = home_currency.upper()
        self._foreign_currency = foreign_currency.upper()
        self._timeout = timeout

    def fetch_home_to_foreign(self) -> float:
        try:
            response = requests.get(self._url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except ValueError as exc:
            raise RateFetchError(f"Failed to decode data: {exc}") from exc
        except requests.RequestException as exc:
            raise RateFetchError(f"Network error: {exc}") from exc

        if not isinstance(data, dict):
            raise RateFetchError("Invalid response from server")
        if data.get("result") != "success":
            raise RateFetchError(f"API returned result={data.get('result')!r}")
        base_code = str(data.get("base_code") or "").upper()
        if base_code != self._home_currency:
            raise RateFetchError(f"Expected rates for {self._home_currency}, got base {data.get('base_code')!r}")
        rates = data.get("rates")
        if not isinstance(rates, dict) or self._foreign_currency not in rates:
            raise RateFetchError(f"Rate for {self._foreign_currency} not found in response")

        try:
            rate = float(rates[self._foreign_currency])
        except (TypeError, ValueError) as exc:
            raise RateFetchError(f"Invalid rate value: {rates[self._foreign_currency]!r}") from exc
        if not math.isfinite(rate) or rate <= 0:
            raise RateFetchError(f"Invalid rate value: {rate!r}")
        logger.debug("Fetched %s rate %s for %s", self._foreign_currency, rate, base_code)
        return rate
