"""Command-line entrypoint for the portfolio tracker."""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from portfolio_tracker.application.dto import EntryRequest
from portfolio_tracker.application.use_cases import (
    ImportHistoryUseCase,
    PortfolioContext,
    PortfolioGrowthUseCase,
    RecordEntryUseCase,
    RefreshRateUseCase,
    SummarizePortfolioUseCase,
)
from portfolio_tracker.bootstrap import build_context
from portfolio_tracker.config import Settings, load_settings, setup_logging
from portfolio_tracker.domain.dates import format_entry_date, parse_entry_date
from portfolio_tracker.domain.models import AssetCategory, AssetDefinition
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.errors import ConfigurationError, InvalidInputError
from portfolio_tracker.infrastructure.storage.catalog_store import save_catalog
from portfolio_tracker.presentation.summary_report import changes_to_rows, format_money, whole_units

EXIT_INVALID_INPUT = 2


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track manually entered investments across two currencies")
    parser.add_argument("--data-dir", type=str, help="Directory holding the portfolio data files")
    parser.add_argument("--log-level", type=str, help="Logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    set_cmd = sub.add_parser("set", help="Record the value of an asset on a date")
    set_cmd.add_argument("asset", type=str)
    set_cmd.add_argument("date", type=str, help="Entry date, e.g. '1 Jan 2024' or 2024-01-01")
    set_cmd.add_argument("amount", type=str)

    remove_cmd = sub.add_parser("remove", help="Delete the value recorded for an asset on a date")
    remove_cmd.add_argument("asset", type=str)
    remove_cmd.add_argument("date", type=str)

    sub.add_parser("summary", help="Show latest values and totals")

    growth_cmd = sub.add_parser("growth", help="Show total value per date and period changes")
    growth_cmd.add_argument("--forward-fill", action="store_true", help="Carry each asset's last value forward")

    refresh_cmd = sub.add_parser("refresh-rate", help="Fetch the latest exchange rate")
    refresh_cmd.add_argument("--force", action="store_true", help="Refresh even if today's rate is cached")

    import_cmd = sub.add_parser("import", help="Import a CSV or Excel history file")
    import_cmd.add_argument("path", type=str)

    sub.add_parser("assets", help="List configured assets")

    add_asset_cmd = sub.add_parser("add-asset", help="Add an asset to the catalogue file")
    add_asset_cmd.add_argument("name", type=str)
    add_asset_cmd.add_argument("--category", choices=[c.value for c in AssetCategory], default=AssetCategory.HOME.value)
    return parser.parse_args(argv)


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    overrides = {}
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir).expanduser()
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return replace(settings, **overrides) if overrides else settings


def _print_summary(context: PortfolioContext, settings: Settings) -> None:
    summary = SummarizePortfolioUseCase(context).execute()
    home, foreign = settings.home_currency, settings.foreign_currency
    print("Portfolio Summary")
    print("=================")
    for category in summary.categories:
        heading = f"{home} assets" if category.category is AssetCategory.HOME else f"{foreign} assets"
        print(f"\n{heading}: {format_money(category.total, home)} (change {format_money(category.change, home)})")
        if category.category is AssetCategory.FOREIGN:
            converted = PortfolioValuator.to_foreign(category.total, summary.rate)
            print(f"  = {format_money(converted, foreign)}")
        for asset in category.assets:
            native_currency = foreign if asset.category is AssetCategory.FOREIGN else home
            when = format_entry_date(asset.latest_date) if asset.latest_date else "no entries"
            print(f"- {asset.name}: {format_money(asset.native_value, native_currency)} ({when})")
    print(f"\nTotal: {format_money(summary.overall_total, home)}")
    print(f"Rate: 1 {home} = {summary.rate.home_to_foreign:.4f} {foreign}")


def _print_growth(context: PortfolioContext, settings: Settings, forward_fill: bool) -> None:
    growth = PortfolioGrowthUseCase(context).execute(forward_fill=forward_fill)
    if not growth.series:
        print("No entries recorded.")
        return
    print("Portfolio Growth")
    print("================")
    for point in growth.series:
        print(f"{format_entry_date(point.point_date)}: {format_money(point.value, settings.home_currency)}")
    if growth.changes:
        print("\nPeriod changes:")
        for row in changes_to_rows(growth.changes):
            print(f"- {row['period']}: {row['delta']} ({row['percent_delta']}%)")
    print(f"\nGrowth: {format_money(growth.growth, settings.home_currency)}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = _settings_for(args)
    setup_logging(settings.log_level)
    context = build_context(settings)

    try:
        if args.command == "set":
            entry_date = parse_entry_date(args.date)
            value = RecordEntryUseCase(context).execute(
                EntryRequest(asset=args.asset, entry_date=entry_date, amount=args.amount)
            )
            print(f"Recorded {args.asset} on {format_entry_date(entry_date)}: {whole_units(value)}")
        elif args.command == "remove":
            removed = context.store.remove_value(args.asset, parse_entry_date(args.date))
            print("Removed entry." if removed else "No entry for that date.")
        elif args.command == "summary":
            _print_summary(context, settings)
        elif args.command == "growth":
            _print_growth(context, settings, args.forward_fill)
        elif args.command == "refresh-rate":
            outcome = RefreshRateUseCase(context).execute(force=args.force)
            if outcome is None:
                print("Exchange rate is already up to date.")
            elif outcome.success:
                print(f"Updated: 1 {settings.home_currency} = {outcome.rate.home_to_foreign:.4f} {settings.foreign_currency}")
            else:
                print(outcome.error)
                return 1
        elif args.command == "import":
            response = ImportHistoryUseCase(context).execute(Path(args.path))
            print(f"Imported {response.imported} entries.")
            for asset in response.skipped_assets:
                print(f"- skipped unknown asset: {asset}")
        elif args.command == "assets":
            for definition in context.store.catalog:
                print(f"{definition.name} ({definition.category.value})")
            for name in context.store.retained_assets():
                if name not in context.store.catalog:
                    print(f"{name} (not in catalogue, saved entries kept)")
        elif args.command == "add-asset":
            definition = AssetDefinition(name=args.name.strip(), category=AssetCategory(args.category))
            if not definition.name:
                raise InvalidInputError("Asset name must not be empty")
            save_catalog([*context.store.catalog, definition], settings.catalog_path)
            print(f"Added {definition.name} ({definition.category.value}) to {settings.catalog_path}")
    except (InvalidInputError, ConfigurationError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        context.rate_provider.close()

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
