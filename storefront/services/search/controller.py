"""Debounced search-as-you-type with stale response suppression."""

from __future__ import annotations

import asyncio
import logging

from storefront.config import settings
from storefront.models.identity import Identity
from storefront.models.product import ProductSummary
from storefront.models.search import SearchSnapshot, SearchStatus
from storefront.services.gateway.base import RepositoryGateway
from storefront.services.search.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class SearchSessionClosed(RuntimeError):
    """Raised when input arrives for a controller that has been closed."""


class IncrementalSearchController:
    """Turns keystrokes into at most one remote lookup per pause in typing.

    Every remote lookup is tagged with a generation number. Only the
    response carrying the current generation may update the results, so
    a slow early response can never overwrite a later one regardless of
    arrival order. Clearing or closing the session bumps the generation,
    which turns anything still in flight into a no-op.
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        scheduler: Scheduler,
        *,
        identity: Identity | None = None,
        debounce_seconds: float | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._scheduler = scheduler
        self._identity = identity
        self._debounce = (
            settings.search_debounce_seconds
            if debounce_seconds is None
            else debounce_seconds
        )
        self._timeout = (
            settings.SEARCH_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
        )

        self._query = ""
        self._generation = 0
        self._results: list[ProductSummary] = []
        self._loading = False
        self._failed = False
        self._closed = False
        self._timer: TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def query(self) -> str:
        return self._query

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def results(self) -> list[ProductSummary]:
        return list(self._results)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def status(self) -> SearchStatus:
        if self._timer is not None:
            return SearchStatus.DEBOUNCING
        if self._loading:
            return SearchStatus.SEARCHING
        if self._failed:
            return SearchStatus.ERROR
        return SearchStatus.IDLE

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(
            query=self._query,
            status=self.status,
            loading=self._loading,
            generation=self._generation,
            results=self.results,
        )

    def on_input(self, text: str) -> None:
        """Record the latest search box contents and restart the debounce."""

        if self._closed:
            raise SearchSessionClosed("Search session is closed")
        self._query = text
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self._debounce, self._on_timer)

    def clear(self) -> None:
        """Empty the search box: drop the timer and ignore in-flight lookups."""

        self._cancel_timer()
        self._query = ""
        self._invalidate()

    def close(self) -> None:
        self.clear()
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    async def wait_settled(self) -> None:
        """Wait until no lookup is in flight."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _invalidate(self) -> None:
        self._generation += 1
        self._results = []
        self._loading = False
        self._failed = False

    def _on_timer(self) -> None:
        self._timer = None
        query = self._query.strip()
        if not query:
            self._invalidate()
            return

        self._generation += 1
        generation = self._generation
        self._loading = True
        self._failed = False
        task = asyncio.get_running_loop().create_task(self._search(query, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _elapsed_ms(self, started: float) -> int:
        return round((self._scheduler.now() - started) * 1000)

    async def _search(self, query: str, generation: int) -> None:
        started = self._scheduler.now()
        try:
            results = await asyncio.wait_for(
                self._gateway.search_products(query),
                timeout=self._timeout,
            )
        except Exception as exc:  # pylint: disable=broad-exception-caught
            if generation != self._generation:
                return
            logger.warning(
                "Search failed: %s",
                exc or type(exc).__name__,
                extra={
                    "query": query,
                    "generation": generation,
                    "elapsed_ms": self._elapsed_ms(started),
                    "user_id": self._identity.user_id if self._identity else None,
                },
            )
            self._results = []
            self._loading = False
            self._failed = True
            return

        if generation != self._generation:
            logger.debug(
                "Discarding stale search response",
                extra={"generation": generation, "current": self._generation},
            )
            return

        self._results = list(results)
        self._loading = False
        self._failed = False
        logger.debug(
            "Search completed",
            extra={
                "query": query,
                "generation": generation,
                "results": len(self._results),
                "elapsed_ms": self._elapsed_ms(started),
            },
        )
