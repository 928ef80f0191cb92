"""Two-currency manual portfolio tracker."""
from portfolio_tracker.application.use_cases import (
    ImportHistoryUseCase,
    PortfolioContext,
    PortfolioGrowthUseCase,
    RecordEntryUseCase,
    RefreshRateUseCase,
    SummarizePortfolioUseCase,
)
from portfolio_tracker.bootstrap import build_context
from portfolio_tracker.domain.models import AssetCatalog, AssetCategory, AssetDefinition, ExchangeRate
from portfolio_tracker.domain.rates import RateProvider
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.domain.store import EntryStore

__all__ = [
    "AssetCatalog",
    "AssetCategory",
    "AssetDefinition",
    "EntryStore",
    "ExchangeRate",
    "ImportHistoryUseCase",
    "PortfolioContext",
    "PortfolioGrowthUseCase",
    "PortfolioValuator",
    "RateProvider",
    "RecordEntryUseCase",
    "RefreshRateUseCase",
    "SummarizePortfolioUseCase",
    "build_context",
]
