"""
Table rendering for the sentiment widget.

`render_table` builds the header/body skeleton synchronously; enrichment
cells start as a placeholder and are filled later by the coordinator.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd
import streamlit as st

from sentiment_table.config import LOADING_TEXT, SENTIMENT_HEADER, SentimentTableError
from sentiment_table.data.binding import DataRow, FieldDescriptor


class MissingFieldError(SentimentTableError, KeyError):
    """A data row does not carry the selected dimension or measure key."""


@dataclass
class EnrichmentCell:
    value: str = LOADING_TEXT
    generation: int = 0

    def write(self, value: str) -> None:
        self.value = "" if value is None else str(value)


@dataclass
class RowView:
    index: int
    dimension_text: str
    measure_text: str
    enrichment: EnrichmentCell = field(default_factory=EnrichmentCell)

    def cells(self) -> List[str]:
        return [self.dimension_text, self.measure_text, self.enrichment.value]


@dataclass
class TableView:
    """Render target standing in for the widget's header and body elements."""

    header: List[str] = field(default_factory=list)
    body: List[RowView] = field(default_factory=list)

    def clear(self) -> None:
        self.header = []
        self.body = []

    def rows(self) -> List[List[str]]:
        return [row.cells() for row in self.body]

    def to_frame(self) -> pd.DataFrame:
        if not self.header:
            return pd.DataFrame()
        return pd.DataFrame(self.rows(), columns=self.header)

    def to_html(self) -> str:
        head = "".join(f"<th>{html.escape(label)}</th>" for label in self.header)
        body = "".join(
            "<tr>" + "".join(f"<td>{html.escape(text)}</td>" for text in row) + "</tr>"
            for row in self.rows()
        )
        return (
            '<table class="sentiment-table">'
            f"<thead><tr>{head}</tr></thead>"
            f"<tbody>{body}</tbody>"
            "</table>"
        )


def _read(value: Any, attr: str) -> str:
    if isinstance(value, Mapping):
        raw = value.get(attr)
    else:
        raw = getattr(value, attr, None)
    return "" if raw is None else str(raw)


def _cell(row: DataRow, descriptor: FieldDescriptor, attr: str, index: int) -> str:
    try:
        value = row[descriptor.key]
    except KeyError:
        raise MissingFieldError(f"Row {index} has no field {descriptor.key!r}") from None
    return _read(value, attr)


def render_table(
    view: TableView,
    dimensions: Sequence[FieldDescriptor],
    measures: Sequence[FieldDescriptor],
    rows: Sequence[DataRow],
    generation: int = 0,
) -> Optional[List[RowView]]:
    """Rebuild `view` from the first dimension and first measure.

    Returns the new row views, or None when either descriptor list is empty,
    in which case `view` is left exactly as it was.
    """
    if not dimensions or not measures:
        return None
    dimension, measure = dimensions[0], measures[0]

    # Read every row before touching the view so a bad row leaves it intact
    prepared = [
        (_cell(row, dimension, "label", i), _cell(row, measure, "formatted", i))
        for i, row in enumerate(rows)
    ]

    view.clear()
    view.header = [dimension.label, measure.label, SENTIMENT_HEADER]
    for i, (dimension_text, measure_text) in enumerate(prepared):
        view.body.append(
            RowView(
                index=i,
                dimension_text=dimension_text,
                measure_text=measure_text,
                enrichment=EnrichmentCell(generation=generation),
            )
        )
    return view.body


def show_table(
    view: TableView,
    placeholder=None,
    height: int = 400,
) -> None:
    """Draw `view` with Streamlit; cell text is always shown as plain text."""
    target = placeholder if placeholder is not None else st
    if not view.header:
        target.info("No data to display.")
        return

    frame = view.to_frame()
    target.dataframe(
        frame,
        use_container_width=True,
        height=height,
        hide_index=True,
    )