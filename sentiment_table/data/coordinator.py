"""
Per-row enrichment fan-out.

Each rendered row gets its own asyncio task that classifies the row's
dimension text and writes the label into that row's enrichment cell. Tasks
are fire-and-forget: render never waits on them and none is ever cancelled.

Hosts that call the widget from inside a running event loop get their tasks
on that loop. Synchronous hosts get them on a background loop thread owned by
the coordinator, started on first use.

Every render bumps a generation counter. A result for a row built by an older
render is dropped (when `suppress_stale` is on) instead of being written into
a row that is no longer displayed.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Callable, Optional, Protocol, Sequence, Set

from sentiment_table.config import API_KEY_MISSING, SENTIMENT_ERROR
from sentiment_table.ui.table import RowView

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    async def classify(self, text: str, api_key: str) -> str: ...


CellListener = Callable[[RowView], None]


class RowEnrichmentCoordinator:
    def __init__(
        self,
        client: Classifier,
        max_concurrency: Optional[int] = None,
        suppress_stale: bool = True,
        on_cell_update: Optional[CellListener] = None,
    ):
        self.client = client
        self.max_concurrency = max_concurrency
        self.suppress_stale = suppress_stale
        self.on_cell_update = on_cell_update
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._futures: Set[concurrent.futures.Future] = set()
        self._futures_lock = threading.Lock()
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None
        self._bg_loop: Optional[asyncio.AbstractEventLoop] = None
        self._bg_thread: Optional[threading.Thread] = None
        self.stale_drops = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> int:
        with self._futures_lock:
            return len(self._tasks) + len(self._futures)

    def begin_render(self) -> int:
        self._generation += 1
        return self._generation

    def dispatch(self, rows: Sequence[RowView], api_key: str) -> int:
        """Start enrichment for `rows`; returns how many requests were scheduled."""
        if not api_key:
            for row in rows:
                self._apply(row, API_KEY_MISSING)
            return 0

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for row in rows:
            if loop is not None:
                task = loop.create_task(self._enrich(row, api_key))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
            else:
                future = asyncio.run_coroutine_threadsafe(self._enrich(row, api_key), self._background_loop())
                with self._futures_lock:
                    self._futures.add(future)
                future.add_done_callback(self._forget_future)
        logger.debug(f"Dispatched {len(rows)} enrichment request(s) for render {self._generation}")
        return len(rows)

    def _background_loop(self) -> asyncio.AbstractEventLoop:
        if self._bg_loop is None:
            loop = asyncio.new_event_loop()
            thread = threading.Thread(target=loop.run_forever, name="sentiment-enrichment", daemon=True)
            thread.start()
            self._bg_loop, self._bg_thread = loop, thread
        return self._bg_loop

    def _forget_future(self, future: concurrent.futures.Future) -> None:
        with self._futures_lock:
            self._futures.discard(future)

    def _limiter(self) -> Optional[asyncio.Semaphore]:
        if self.max_concurrency is None:
            return None
        # A semaphore belongs to one event loop; hosts may run a fresh loop per rerun
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
            self._semaphore_loop = loop
        return self._semaphore

    async def _classify(self, text: str, api_key: str) -> str:
        try:
            return await self.client.classify(text, api_key)
        except Exception as e:
            logger.exception(f"Classifier failed: {e}")
            return SENTIMENT_ERROR

    async def _enrich(self, row: RowView, api_key: str) -> None:
        limiter = self._limiter()
        if limiter is None:
            label = await self._classify(row.dimension_text, api_key)
        else:
            async with limiter:
                label = await self._classify(row.dimension_text, api_key)
        self._apply(row, label)

    def _apply(self, row: RowView, value: str) -> None:
        generation = row.enrichment.generation
        if self.suppress_stale and generation != self._generation:
            self.stale_drops += 1
            logger.debug(
                f"Dropped stale result for row {row.index} "
                f"(render {generation}, current {self._generation})"
            )
            return
        row.enrichment.write(value)
        if self.on_cell_update is None:
            return
        try:
            self.on_cell_update(row)
        except Exception:
            logger.exception(f"Cell update listener failed for row {row.index}")

    async def drain(self) -> None:
        """Wait until every outstanding task on this loop has settled, including ones started meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until background-loop requests settle; False if `timeout` expired first."""
        with self._futures_lock:
            futures = list(self._futures)
        _, not_done = concurrent.futures.wait(futures, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Stop the background loop thread, if one was started."""
        if self._bg_loop is None:
            return
        self._bg_loop.call_soon_threadsafe(self._bg_loop.stop)
        if self._bg_thread is not None:
            self._bg_thread.join()
        self._bg_loop.close()
        self._bg_loop, self._bg_thread = None, None
