"""
Layout helpers for the Streamlit application (page setup, sidebar, data source).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import gspread
import pandas as pd
import streamlit as st

from sentiment_table.config import ConfigError, EnrichmentSettings
from sentiment_table.data.binding import DataBinding
from sentiment_table.data.loader import binding_from_frame, load_csv_frame, load_sheet_binding, sample_binding

logger = logging.getLogger(__name__)

SOURCE_SAMPLE = "Sample reviews"
SOURCE_CSV = "Upload CSV"
SOURCE_SHEET = "Google Sheet"
SOURCES = [SOURCE_SAMPLE, SOURCE_CSV, SOURCE_SHEET]


@dataclass
class SidebarState:
    source: str
    api_key: str
    upload: Optional[Any] = None
    sheet_name: Optional[str] = None


def setup_page() -> None:
    """Set Streamlit page configuration."""
    st.set_page_config(
        page_title="Review Sentiment Table",
        layout="wide",
        page_icon=":speech_balloon:",
    )


def sidebar_controls(settings: EnrichmentSettings) -> SidebarState:
    st.sidebar.markdown("### Data")
    source = st.sidebar.radio("Source", SOURCES, key="sa_source")
    upload = None
    sheet_name = None
    if source == SOURCE_CSV:
        upload = st.sidebar.file_uploader("Reviews CSV", type=["csv"], key="sa_upload")
    elif source == SOURCE_SHEET:
        sheet_name = st.sidebar.text_input("Worksheet", value="", key="sa_sheet_name").strip() or None

    st.sidebar.markdown("### Sentiment")
    api_key = st.sidebar.text_input(
        "Gemini API key",
        value=settings.api_key,
        type="password",
        key="sa_api_key",
        help="Leave empty to render the table without sentiment lookups.",
    )
    return SidebarState(source=source, api_key=api_key.strip(), upload=upload, sheet_name=sheet_name)


def _pick_columns(df: pd.DataFrame) -> Optional[DataBinding]:
    columns = [str(c) for c in df.columns]
    if len(columns) < 2:
        st.info("The file needs at least a text column and a numeric column.")
        return None
    col_text, col_measure = st.columns(2)
    with col_text:
        text_col = st.selectbox("Review column", columns, index=0, key="sa_text_col")
    with col_measure:
        measure_options = [c for c in columns if c != text_col]
        measure_col = st.selectbox("Measure column", measure_options, index=0, key="sa_measure_col")
    return binding_from_frame(df, dimension_columns=[text_col], measure_columns=[measure_col])


def load_binding(state: SidebarState) -> Optional[DataBinding]:
    """Resolve the selected data source; problems are shown in the page, not raised."""
    try:
        if state.source == SOURCE_SAMPLE:
            return sample_binding()
        if state.source == SOURCE_CSV:
            if state.upload is None:
                st.info("Upload a CSV file to get started.")
                return None
            return _pick_columns(load_csv_frame(state.upload))
        return load_sheet_binding(sheet_name=state.sheet_name)
    except ConfigError as e:
        st.error(str(e))
    except gspread.exceptions.GSpreadException as e:
        logger.error(f"Google Sheet load failed: {e}")
        st.error(f"Could not load the Google Sheet: {e}")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read uploaded CSV: {e}")
        st.error(f"Could not read the CSV file: {e}")
    return None
