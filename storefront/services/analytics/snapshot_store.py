"""Redis persistence for the latest analytics snapshot."""

from __future__ import annotations

import redis.asyncio as redis
from pydantic import ValidationError

from storefront.config import settings
from storefront.models.analytics import AnalyticsSnapshot


class AnalyticsSnapshotStore:
    """Stores the dashboard snapshot and the dashboard-open heartbeat."""

    def __init__(self, client: redis.Redis):
        self._client = client
        self._key = settings.ANALYTICS_SNAPSHOT_KEY
        self._ttl = settings.ANALYTICS_SNAPSHOT_TTL_SECONDS
        self._dashboard_key = settings.ANALYTICS_DASHBOARD_KEY
        self._dashboard_ttl = settings.ANALYTICS_REFRESH_SECONDS * 2

    async def save(self, snapshot: AnalyticsSnapshot) -> None:
        await self._client.set(self._key, snapshot.model_dump_json(), ex=self._ttl)

    async def fetch(self) -> AnalyticsSnapshot | None:
        raw = await self._client.get(self._key)
        if not raw:
            return None
        try:
            return AnalyticsSnapshot.model_validate_json(raw)
        except ValidationError:
            return None

    async def mark_dashboard_open(self) -> None:
        await self._client.set(self._dashboard_key, "1", ex=self._dashboard_ttl)

    async def dashboard_open(self) -> bool:
        return bool(await self._client.exists(self._dashboard_key))
