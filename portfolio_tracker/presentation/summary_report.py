"""Report renderers for portfolio summaries and growth series."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

import pandas as pd

from portfolio_tracker.domain.dates import format_entry_date
from portfolio_tracker.domain.results import PeriodChange, PortfolioSummary, SeriesPoint

CURRENCY_SYMBOLS = {"GBP": "£", "INR": "₹", "USD": "$", "EUR": "€"}


def whole_units(amount: float) -> int:
    return int(round(amount))


def format_money(amount: float, currency: str) -> str:
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(whole_units(amount)):,}"


def summary_to_rows(summary: PortfolioSummary) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for asset in summary.iter_assets():
        rows.append(
            {
                "asset": asset.name,
                "category": asset.category.value,
                "latest_date": format_entry_date(asset.latest_date) if asset.latest_date else "",
                "native_value": str(whole_units(asset.native_value)),
                "base_value": str(whole_units(asset.base_value)),
                "change": str(whole_units(asset.change)),
            }
        )
    for category in summary.categories:
        rows.append(
            {
                "asset": f"Total {category.category.value}",
                "category": category.category.value,
                "latest_date": "",
                "native_value": "",
                "base_value": str(whole_units(category.total)),
                "change": str(whole_units(category.change)),
            }
        )
    rows.append(
        {
            "asset": "Total",
            "category": "",
            "latest_date": "",
            "native_value": "",
            "base_value": str(whole_units(summary.overall_total)),
            "change": "",
        }
    )
    return rows


def changes_to_rows(changes: Sequence[PeriodChange]) -> list[dict[str, str]]:
    return [
        {
            "period": change.label,
            "delta": str(whole_units(change.delta)),
            "percent_delta": f"{change.percent_delta:.2f}",
        }
        for change in changes
    ]


def series_to_dataframe(series: Sequence[SeriesPoint]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [{"date": pd.Timestamp(point.point_date), "value": point.value} for point in series],
        columns=["date", "value"],
    )
    return frame.set_index("date")


def render_csv(rows: Sequence[dict[str, str]]) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(rows: Sequence[dict[str, str]]) -> str:
    if not rows:
        return "<p>No entries recorded.</p>"
    header = "".join(f"<th>{html.escape(col)}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"
