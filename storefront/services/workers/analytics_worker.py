"""Worker that keeps the admin analytics snapshot fresh."""

from __future__ import annotations

import asyncio
import logging
import os
import socket
import uuid

from storefront.config import settings
from storefront.services.analytics.aggregator import AnalyticsAggregator
from storefront.services.analytics.snapshot_store import AnalyticsSnapshotStore
from storefront.services.gateway.rest_gateway import close_gateway, get_gateway
from storefront.services.storage.redis_client import get_redis_client
from storefront.services.workers.base import BaseWorker

logger = logging.getLogger(__name__)


class AnalyticsRefreshWorker(BaseWorker):
    """Recomputes the snapshot on a fixed interval while a dashboard is open."""

    def __init__(
        self,
        *,
        aggregator: AnalyticsAggregator,
        store: AnalyticsSnapshotStore,
        interval_seconds: float | None = None,
        consumer_name: str | None = None,
    ) -> None:
        super().__init__(consumer_name)
        self.aggregator = aggregator
        self.store = store
        self.interval_seconds = interval_seconds or settings.ANALYTICS_REFRESH_SECONDS

    async def run_forever(self) -> None:
        logger.info(
            "Analytics worker started",
            extra={"consumer": self.consumer_name, "interval": self.interval_seconds},
        )
        try:
            while not self.is_shutdown_requested():
                try:
                    await self.refresh_once()
                except Exception as exc:
                    logger.error("Analytics refresh failed: %s", exc, exc_info=True)
                await self._sleep(self.interval_seconds)
        except asyncio.CancelledError:
            logger.info("Analytics worker %s cancelled", self.consumer_name)
            raise

    async def refresh_once(self) -> bool:
        """Refresh the snapshot if a dashboard is watching; return whether it ran."""

        if not await self.store.dashboard_open():
            logger.debug("No open dashboard, skipping analytics refresh")
            return False
        snapshot = await self.aggregator.build_snapshot()
        await self.store.save(snapshot)
        return True

    @staticmethod
    def _build_consumer_name() -> str:
        hostname = socket.gethostname()
        pid = os.getpid()
        suffix = uuid.uuid4().hex[:6]
        return f"analytics-worker:{hostname}:{pid}:{suffix}"


def create_analytics_worker() -> AnalyticsRefreshWorker:
    return AnalyticsRefreshWorker(
        aggregator=AnalyticsAggregator(get_gateway()),
        store=AnalyticsSnapshotStore(get_redis_client()),
    )


async def run_worker() -> None:
    worker = create_analytics_worker()
    try:
        await worker.run_forever()
    finally:
        await close_gateway()


def main() -> None:
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logger.info("Analytics worker interrupted, exiting")


if __name__ == "__main__":
    main()
