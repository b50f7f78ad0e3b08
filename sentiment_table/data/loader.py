"""
Data sources that produce a `DataBinding` for the widget: a pandas DataFrame,
a CSV upload, a Google Sheet worksheet, or the built-in review sample.
"""

import logging
import os
from typing import Any, Dict, List, Optional, Sequence

import gspread
import pandas as pd
import streamlit as st
from google.oauth2.service_account import Credentials

from sentiment_table.config import ConfigError, get_secret
from sentiment_table.data.binding import (
    DIMENSIONS_KEY,
    MEASURES_KEY,
    BindingState,
    CellValue,
    DataBinding,
)
from sentiment_table.ui.formatting import format_number, humanize_column

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

DEFAULT_SHEET_NAME = "Reviews"

SAMPLE_REVIEWS = [
    ("Great product, arrived early and works perfectly.", 5),
    ("Stopped working after two days. Very disappointed.", 1),
    ("It does the job. Nothing special.", 3),
    ("Customer support resolved my issue within an hour!", 4),
    ("Packaging was damaged and a part was missing.", 2),
]


def _label_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        # list-like cell values
        pass
    return str(value)


def _split_columns(df: pd.DataFrame) -> tuple:
    numeric = [c for c in df.columns if pd.api.types.is_numeric_dtype(df[c]) and not pd.api.types.is_bool_dtype(df[c])]
    text = [c for c in df.columns if c not in numeric]
    return text, numeric


def binding_from_frame(
    df: pd.DataFrame,
    dimension_columns: Optional[Sequence[str]] = None,
    measure_columns: Optional[Sequence[str]] = None,
    labels: Optional[Dict[str, str]] = None,
) -> DataBinding:
    """Wrap a DataFrame as a success-state binding.

    Columns default to non-numeric -> dimensions and numeric -> measures, in
    frame order. `labels` overrides the humanized column headers.
    """
    labels = labels or {}
    working = df.copy()
    inferred_dims, inferred_measures = _split_columns(working)
    dims = list(dimension_columns) if dimension_columns is not None else inferred_dims
    measures = list(measure_columns) if measure_columns is not None else inferred_measures

    missing = [c for c in dims + measures if c not in working.columns]
    if missing:
        raise ConfigError(f"Columns not found in data: {missing}")

    for col in measures:
        working[col] = pd.to_numeric(working[col], errors="coerce")

    metadata = {
        DIMENSIONS_KEY: {c: {"description": labels.get(c, humanize_column(c))} for c in dims},
        MEASURES_KEY: {c: {"description": labels.get(c, humanize_column(c))} for c in measures},
    }

    rows: List[Dict[str, CellValue]] = []
    for record in working.to_dict(orient="records"):
        row: Dict[str, CellValue] = {}
        for col in dims:
            text = _label_text(record.get(col))
            row[col] = CellValue(label=text, formatted=text)
        for col in measures:
            value = record.get(col)
            row[col] = CellValue(label=_label_text(value), formatted=format_number(value))
        rows.append(row)

    logger.info(f"Built binding with {len(rows)} rows, {len(dims)} dimension(s), {len(measures)} measure(s)")
    return DataBinding(state=BindingState.SUCCESS, metadata=metadata, data=rows)


def load_csv_frame(source) -> pd.DataFrame:
    """Read a CSV path or uploaded buffer; only empty fields count as missing."""
    return pd.read_csv(source, keep_default_na=False, na_values=[""])


def sample_binding() -> DataBinding:
    df = pd.DataFrame(SAMPLE_REVIEWS, columns=["review", "rating"])
    return binding_from_frame(df, labels={"review": "Review", "rating": "Rating"})


def load_sheet_binding(
    spreadsheet_id: Optional[str] = None,
    sheet_name: Optional[str] = None,
    **kwargs,
) -> DataBinding:
    """Resolve sheet settings from env/secrets and wrap the worksheet as a binding."""
    spreadsheet_id = spreadsheet_id or get_secret("SPREADSHEET_ID")
    sheet_name = sheet_name or get_secret("SHEET_NAME", DEFAULT_SHEET_NAME) or DEFAULT_SHEET_NAME
    if not spreadsheet_id:
        raise ConfigError("SPREADSHEET_ID env var missing (env or secrets).")

    service_account_file = get_secret("GOOGLE_APPLICATION_CREDENTIALS", "google-credentials.json")
    if not service_account_file or not os.path.exists(service_account_file):
        raise ConfigError(f"Service account file not found: {service_account_file}")

    df = _load_sheet_frame(spreadsheet_id, sheet_name, service_account_file)
    return binding_from_frame(df, **kwargs)


@st.cache_data(show_spinner=False, ttl=600)
def _load_sheet_frame(spreadsheet_id: str, sheet_name: str, service_account_file: str) -> pd.DataFrame:
    """Cached by spreadsheet_id, sheet_name, and service_account_file."""
    credentials = Credentials.from_service_account_file(service_account_file, scopes=SCOPES)
    client = gspread.authorize(credentials)
    ws = client.open_by_key(spreadsheet_id).worksheet(sheet_name)
    df = pd.DataFrame(ws.get_all_records())
    logger.info(f"Loaded {len(df)} rows from sheet {sheet_name!r}")
    return df
