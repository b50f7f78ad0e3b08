"""
Widget shell driven by the host dashboard's lifecycle callbacks.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sentiment_table.config import EnrichmentSettings
from sentiment_table.data.binding import DataBinding, parse_metadata
from sentiment_table.data.coordinator import Classifier, RowEnrichmentCoordinator
from sentiment_table.data.enrichment import SentimentClient
from sentiment_table.ui.table import TableView, render_table

logger = logging.getLogger(__name__)

API_KEY_PROPERTY = "apiKey"
DATA_BINDING_PROPERTY = "dataBinding"


class EnhancedTableWidget:
    """Table of review text, one measure, and a sentiment label per row.

    The host calls `on_resize` / `on_after_update`; both re-render from
    scratch. Sentiment labels arrive later through the coordinator.
    """

    def __init__(
        self,
        client: Optional[Classifier] = None,
        attributes: Optional[Mapping[str, Any]] = None,
        coordinator: Optional[RowEnrichmentCoordinator] = None,
        settings: Optional[EnrichmentSettings] = None,
    ):
        settings = settings or EnrichmentSettings()
        if coordinator is None:
            coordinator = RowEnrichmentCoordinator(
                client or SentimentClient(settings),
                max_concurrency=settings.max_concurrency,
                suppress_stale=settings.suppress_stale,
            )
        self.coordinator = coordinator
        self.attributes = dict(attributes or {})
        self.view = TableView()
        self.data_binding: Optional[DataBinding] = None
        self._api_key: Optional[str] = None

    @property
    def api_key(self) -> str:
        return self._api_key or self.attributes.get(API_KEY_PROPERTY) or ""

    @api_key.setter
    def api_key(self, value: Optional[str]) -> None:
        self._api_key = value

    def on_resize(self, width: Any = None, height: Any = None) -> None:
        self.render()

    def on_after_update(self, changed_props: Optional[Mapping[str, Any]] = None) -> None:
        changed_props = changed_props or {}
        if API_KEY_PROPERTY in changed_props:
            self.api_key = changed_props[API_KEY_PROPERTY]
        if DATA_BINDING_PROPERTY in changed_props:
            binding = changed_props[DATA_BINDING_PROPERTY]
            if isinstance(binding, Mapping):
                binding = DataBinding.from_mapping(binding)
            self.data_binding = binding
        self.render()

    def render(self) -> bool:
        """Rebuild the table; returns False when the binding is not renderable."""
        binding = self.data_binding
        if binding is None or not binding.is_ready:
            return False

        dimensions, measures = parse_metadata(binding.metadata)
        if not dimensions or not measures:
            logger.debug("Binding has no dimension or no measure; keeping current table")
            return False

        # Resolve the credential once so every row of this render sees the same value
        api_key = self.api_key
        # Generation advances only after the new rows exist
        rows = render_table(
            self.view, dimensions, measures, binding.data,
            generation=self.coordinator.generation + 1,
        )
        if rows is None:
            return False
        self.coordinator.begin_render()
        self.coordinator.dispatch(rows, api_key)
        return True
