"""Quick validation script for the render pipeline.

Run with `python scripts/validate_render.py` to check that the sample reviews
render into a three-column table. With GEMINI_API_KEY set, each row is also
sent for sentiment classification and the settled labels are printed.
"""

from __future__ import annotations

import asyncio

from sentiment_table.bootstrap_env import ensure_env
from sentiment_table.config import API_KEY_MISSING, LOADING_TEXT, EnrichmentSettings, configure_logging
from sentiment_table.data.loader import sample_binding
from sentiment_table.ui.widget import EnhancedTableWidget


async def _run(widget: EnhancedTableWidget) -> None:
    widget.on_after_update({"dataBinding": sample_binding()})
    await widget.coordinator.drain()


def main() -> None:
    ensure_env()
    configure_logging()
    settings = EnrichmentSettings.from_env()
    widget = EnhancedTableWidget(settings=settings)
    widget.api_key = settings.api_key

    asyncio.run(_run(widget))

    if len(widget.view.header) != 3:
        raise SystemExit(f"Unexpected header: {widget.view.header}")
    labels = [row[2] for row in widget.view.rows()]
    assert LOADING_TEXT not in labels, "Every row should settle after drain()"
    if not settings.api_key:
        assert set(labels) == {API_KEY_MISSING}, "Rows without a key should carry the missing-key sentinel"

    print(widget.view.to_frame().to_string(index=False))
    print("Render validation passed. Rows:", len(labels))


if __name__ == "__main__":
    main()
