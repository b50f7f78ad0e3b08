from sentiment_table.bootstrap_env import ensure_env

ensure_env()  # must run before settings are read

import asyncio

import pandas as pd
import streamlit as st

from sentiment_table.config import SENTIMENT_HEADER, ConfigError, EnrichmentSettings, configure_logging
from sentiment_table.data.binding import DataBinding
from sentiment_table.ui.layout import load_binding, setup_page, sidebar_controls
from sentiment_table.ui.table import show_table
from sentiment_table.ui.widget import EnhancedTableWidget


def _get_widget(settings: EnrichmentSettings) -> EnhancedTableWidget:
    # One widget per browser session; the credential property lives on it
    widget = st.session_state.get("sa_widget")
    if widget is None:
        widget = EnhancedTableWidget(settings=settings)
        st.session_state["sa_widget"] = widget
    return widget


async def _render(widget: EnhancedTableWidget, binding: DataBinding, api_key: str, placeholder) -> None:
    widget.coordinator.on_cell_update = lambda _row: show_table(widget.view, placeholder)
    try:
        widget.on_after_update({"dataBinding": binding, "apiKey": api_key})
        show_table(widget.view, placeholder)
        await widget.coordinator.drain()
    finally:
        widget.coordinator.on_cell_update = None


def _sentiment_summary(frame: pd.DataFrame) -> None:
    if frame.empty or SENTIMENT_HEADER not in frame.columns:
        return
    counts = frame[SENTIMENT_HEADER].value_counts()
    parts = [f"{label}: {int(count)}" for label, count in counts.items()]
    st.caption(" | ".join(parts))


def main() -> None:
    configure_logging()
    setup_page()
    st.title("Review Sentiment Table")

    try:
        settings = EnrichmentSettings.from_env()
    except ConfigError as e:
        st.error(f"Invalid configuration: {e}")
        return

    controls = sidebar_controls(settings)
    binding = load_binding(controls)
    if binding is None:
        return
    if not binding.data:
        st.warning("The selected data source has no rows.")
        return

    widget = _get_widget(settings)
    placeholder = st.empty()
    asyncio.run(_render(widget, binding, controls.api_key, placeholder))

    frame = widget.view.to_frame()
    _sentiment_summary(frame)
    st.download_button(
        "Download CSV",
        data=frame.to_csv(index=False).encode("utf-8"),
        file_name="review_sentiment.csv",
        mime="text/csv",
    )


if __name__ == "__main__":
    main()
