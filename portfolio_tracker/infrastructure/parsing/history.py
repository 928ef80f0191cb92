"""CSV / Excel history parser producing entries for the store.

The layout is one row per asset: the first column holds the asset name and
every further column header is a date.
"""
from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from portfolio_tracker.domain.dates import parse_entry_date
from portfolio_tracker.domain.models import AssetCatalog, Entry
from portfolio_tracker.errors import InvalidInputError, InvalidValueError
from portfolio_tracker.infrastructure.parsing.utils import ensure_bytes, is_blank, parse_amount

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
# Excel on Windows saves CSV in the ANSI code page.
FALLBACK_CSV_ENCODING = "cp1252"


@dataclass(frozen=True)
class ParsedHistory:
    entries: Sequence[Entry] = field(default_factory=tuple)
    unknown_assets: Sequence[str] = field(default_factory=tuple)


def read_history_frame(source: BytesIO | Path | bytes, excel: bool | None = None) -> pd.DataFrame:
    if excel is None:
        excel = isinstance(source, Path) and source.suffix.lower() in EXCEL_SUFFIXES
    data = ensure_bytes(source)
    try:
        if excel:
            return pd.read_excel(BytesIO(data), sheet_name=0, engine="openpyxl", dtype=str, keep_default_na=False)
        return _read_csv(data)
    except (
        pd.errors.EmptyDataError,
        pd.errors.ParserError,
        ValueError,
        zipfile.BadZipFile,
        InvalidFileException,
    ) as exc:
        raise InvalidInputError(f"Unreadable history file: {exc}") from exc


def _read_csv(data: bytes) -> pd.DataFrame:
    try:
        return pd.read_csv(BytesIO(data), dtype=str, keep_default_na=False, skipinitialspace=True, encoding="utf-8-sig")
    except UnicodeDecodeError:
        logger.info("History file is not UTF-8, retrying as %s", FALLBACK_CSV_ENCODING)
    return pd.read_csv(
        BytesIO(data), dtype=str, keep_default_na=False, skipinitialspace=True, encoding=FALLBACK_CSV_ENCODING
    )


def _header_date(column: object) -> date:
    if isinstance(column, datetime):
        return column.date()
    if isinstance(column, date):
        return column
    return parse_entry_date(str(column))


def frame_to_entries(df: pd.DataFrame, catalog: AssetCatalog) -> ParsedHistory:
    if len(df.columns) < 2:
        raise InvalidInputError("History needs an asset column and at least one date column")
    dates = [_header_date(column) for column in df.columns[1:]]

    entries: list[Entry] = []
    unknown: list[str] = []
    for _, row in df.iterrows():
        asset = str(row.iloc[0]).strip()
        if not asset:
            continue
        if asset not in catalog:
            if asset not in unknown:
                unknown.append(asset)
            logger.warning("Skipping history row for unknown asset %r", asset)
            continue
        for entry_date, cell in zip(dates, row.iloc[1:]):
            if is_blank(cell):
                continue
            try:
                value = parse_amount(cell)
            except InvalidValueError as exc:
                raise InvalidValueError(f"{asset} on {entry_date.isoformat()}: {exc}") from exc
            entries.append(Entry(asset=asset, entry_date=entry_date, value=value))
    return ParsedHistory(entries=tuple(entries), unknown_assets=tuple(unknown))


def history_to_entries(
    source: BytesIO | Path | bytes,
    catalog: AssetCatalog,
    excel: bool | None = None,
) -> ParsedHistory:
    df = read_history_frame(source, excel=excel)
    parsed = frame_to_entries(df, catalog)
    logger.info("Parsed %d history entries", len(parsed.entries))
    return parsed
