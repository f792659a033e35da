"""Admin dashboard analytics routes."""

from __future__ import annotations

import logging
from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends

from storefront.api.dependencies import AdminDependency
from storefront.models.analytics import AnalyticsSnapshot
from storefront.services.analytics.aggregator import AnalyticsAggregator
from storefront.services.analytics.snapshot_store import AnalyticsSnapshotStore
from storefront.services.gateway.base import RepositoryGateway
from storefront.services.gateway.rest_gateway import GatewayDependency
from storefront.services.storage.redis_client import get_redis_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/analytics", tags=["analytics"])


def _get_snapshot_store(
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> AnalyticsSnapshotStore:
    return AnalyticsSnapshotStore(client)


StoreDependency = Annotated[AnalyticsSnapshotStore, Depends(_get_snapshot_store)]


async def _recompute(
    gateway: RepositoryGateway,
    store: AnalyticsSnapshotStore,
) -> AnalyticsSnapshot:
    snapshot = await AnalyticsAggregator(gateway).build_snapshot()
    try:
        await store.save(snapshot)
    except Exception as exc:
        logger.warning("Failed to cache analytics snapshot: %s", exc)
    return snapshot


@router.get(
    "",
    response_model=AnalyticsSnapshot,
    summary="Latest analytics snapshot; keeps the periodic refresh alive",
)
async def get_analytics(
    _admin: AdminDependency,
    gateway: GatewayDependency,
    store: StoreDependency,
) -> AnalyticsSnapshot:
    try:
        await store.mark_dashboard_open()
        cached = await store.fetch()
    except Exception as exc:
        logger.warning("Analytics cache unavailable, computing inline: %s", exc)
        cached = None
    if cached is not None:
        return cached
    return await _recompute(gateway, store)


@router.post(
    "/refresh",
    response_model=AnalyticsSnapshot,
    summary="Recompute the analytics snapshot now",
)
async def refresh_analytics(
    _admin: AdminDependency,
    gateway: GatewayDependency,
    store: StoreDependency,
) -> AnalyticsSnapshot:
    return await _recompute(gateway, store)
