"""Central configuration for the portfolio tracker package."""
from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from portfolio_tracker.domain.models import AssetCategory, AssetDefinition

# Default catalogue; an assets.json override in the data directory replaces it.
HOME_ASSETS = (
    "UK ISA",
    "UK Invest",
    "UK Cash ISA",
    "UK Monzo Pot",
    "UK OakNorth Pot",
    "UK Coinbase",
)
FOREIGN_ASSETS = (
    "India Shares",
    "India Smallcase",
    "India MF",
)

DEFAULT_ASSETS = tuple(AssetDefinition(name, AssetCategory.HOME) for name in HOME_ASSETS) + tuple(
    AssetDefinition(name, AssetCategory.FOREIGN) for name in FOREIGN_ASSETS
)

BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DATA_DIR = BASE_DIR / "data"

SNAPSHOT_FILE_NAME = "portfolio_data.json"
RATE_CACHE_FILE_NAME = "exchange_rate_cache.json"
CATALOG_FILE_NAME = "assets.json"

RATE_ENDPOINT = "https://open.er-api.com/v6/latest/{home}"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(slots=True, frozen=True)
class Settings:
    home_currency: str
    foreign_currency: str
    default_home_to_foreign: float
    rate_endpoint: str
    request_timeout: float
    data_dir: Path
    log_level: str

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / SNAPSHOT_FILE_NAME

    @property
    def rate_cache_path(self) -> Path:
        return self.data_dir / RATE_CACHE_FILE_NAME

    @property
    def catalog_path(self) -> Path:
        return self.data_dir / CATALOG_FILE_NAME

    @property
    def rate_url(self) -> str:
        return self.rate_endpoint.format(home=self.home_currency)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    data_dir = env.get("PORTFOLIO_TRACKER_DATA_DIR")
    return Settings(
        home_currency=env.get("PORTFOLIO_TRACKER_HOME_CURRENCY", "GBP").upper(),
        foreign_currency=env.get("PORTFOLIO_TRACKER_FOREIGN_CURRENCY", "INR").upper(),
        default_home_to_foreign=104.5,
        rate_endpoint=RATE_ENDPOINT,
        request_timeout=10.0,
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        log_level=env.get("PORTFOLIO_TRACKER_LOG_LEVEL", "INFO").upper(),
    )


def setup_logging(level: str = "INFO") -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)


SETTINGS = load_settings()
