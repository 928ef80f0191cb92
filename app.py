"""Streamlit front-end for the portfolio tracker."""
from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from portfolio_tracker import (
    ImportHistoryUseCase,
    PortfolioContext,
    PortfolioGrowthUseCase,
    RecordEntryUseCase,
    RefreshRateUseCase,
    SummarizePortfolioUseCase,
    build_context,
)
from portfolio_tracker.application.dto import EntryRequest
from portfolio_tracker.config import SETTINGS, setup_logging
from portfolio_tracker.domain.models import AssetCategory
from portfolio_tracker.domain.services import PortfolioValuator
from portfolio_tracker.errors import InvalidInputError
from portfolio_tracker.presentation.summary_report import (
    changes_to_rows,
    format_money,
    render_csv,
    render_html,
    series_to_dataframe,
    summary_to_rows,
)


st.set_page_config(page_title="Portfolio", layout="wide")
st.title("Portfolio")

HOME = SETTINGS.home_currency
FOREIGN = SETTINGS.foreign_currency


@st.cache_resource
def get_context() -> PortfolioContext:
    setup_logging(SETTINGS.log_level)
    return build_context(SETTINGS)


context = get_context()
provider = context.rate_provider

# One background refresh per session; the page polls until it completes.
if "rate_refresh" not in st.session_state:
    st.session_state["rate_refresh"] = RefreshRateUseCase(context).execute_in_background()


@st.fragment(run_every=1)
def watch_rate_refresh() -> None:
    pending = st.session_state.get("rate_refresh")
    if pending is None:
        return
    if not pending.done():
        st.caption("Updating exchange rate...")
        return
    st.session_state["rate_refresh"] = None
    st.rerun()


rate = provider.current_rate()
rate_col, refresh_col = st.columns([4, 1])
with rate_col:
    updated = rate.last_updated.strftime("%d %b %Y %H:%M") if rate.last_updated else "never"
    st.caption(f"1 {HOME} = {rate.home_to_foreign:.2f} {FOREIGN} (updated {updated})")
    if st.session_state.get("rate_refresh") is not None:
        watch_rate_refresh()
    elif provider.error_message:
        st.warning(provider.error_message)
with refresh_col:
    if st.button("Refresh rate", disabled=provider.is_loading):
        st.session_state["rate_refresh"] = RefreshRateUseCase(context).execute_in_background(force=True)
        st.rerun()

summary_tab, growth_tab, add_tab = st.tabs(["Summary", "Growth", "Add"])

with summary_tab:
    summary = SummarizePortfolioUseCase(context).execute()
    home_total = summary.category(AssetCategory.HOME)
    foreign_total = summary.category(AssetCategory.FOREIGN)

    st.metric("Total", format_money(summary.overall_total, HOME))
    col1, col2 = st.columns(2)
    with col1:
        st.metric(f"{HOME} Assets", format_money(home_total.total, HOME), delta=format_money(home_total.change, HOME))
    with col2:
        st.metric(
            f"{FOREIGN} Assets",
            format_money(foreign_total.total, HOME),
            delta=format_money(foreign_total.change, HOME),
        )
        st.caption(format_money(PortfolioValuator.to_foreign(foreign_total.total, rate), FOREIGN))

    rows = summary_to_rows(summary)
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
    st.download_button("Download summary CSV", data=render_csv(rows), file_name="portfolio_summary.csv", mime="text/csv")
    st.download_button(
        "Download summary HTML",
        data=render_html(rows).encode("utf-8"),
        file_name="portfolio_summary.html",
        mime="text/html",
    )

with growth_tab:
    forward_fill = st.checkbox("Carry last known value forward", value=False)
    growth = PortfolioGrowthUseCase(context).execute(forward_fill=forward_fill)
    if not growth.series:
        st.info("No entries recorded yet.")
    else:
        st.line_chart(series_to_dataframe(growth.series))
        st.metric("Growth", format_money(growth.growth, HOME))
        if growth.changes:
            st.dataframe(pd.DataFrame(changes_to_rows(growth.changes)), hide_index=True)

with add_tab:
    with st.form("entry_form", clear_on_submit=True):
        asset = st.selectbox("Asset", context.store.catalog.names())
        entry_date = st.date_input("Date", value=date.today())
        amount = st.text_input("Amount")
        submitted = st.form_submit_button("Save")
    if submitted:
        try:
            value = RecordEntryUseCase(context).execute(EntryRequest(asset=asset, entry_date=entry_date, amount=amount))
        except InvalidInputError as exc:
            st.error(str(exc))
        else:
            st.success(f"Saved {asset}: {value:,.0f}")

    st.subheader("Import history")
    upload = st.file_uploader("CSV or Excel file", type=["csv", "xlsx", "xlsm"])
    if upload is not None and st.button("Import"):
        try:
            response = ImportHistoryUseCase(context).execute(
                upload.getvalue(), excel=not upload.name.lower().endswith(".csv")
            )
        except InvalidInputError as exc:
            st.error(str(exc))
        else:
            st.success(f"Imported {response.imported} entries")
            for skipped in response.skipped_assets:
                st.warning(f"Skipped unknown asset: {skipped}")
