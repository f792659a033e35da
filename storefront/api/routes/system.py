"""System-level routes such as health checks."""

from __future__ import annotations

from typing import Annotated

import redis.asyncio as redis
from fastapi import APIRouter, Depends

from storefront.config import settings
from storefront.services.gateway.rest_gateway import GatewayDependency
from storefront.services.storage.redis_client import get_redis_client

router = APIRouter(tags=["system"])

RedisDependency = Annotated[redis.Redis, Depends(get_redis_client)]


@router.get("/")
async def read_root() -> dict[str, str]:
    """Smoke endpoint."""

    return {"message": "Storefront discovery service is running"}


@router.get("/health")
async def health_check(
    gateway: GatewayDependency,
    redis_client: RedisDependency,
) -> dict[str, str]:
    """Health check with backend and Redis connectivity."""

    backend_status = "connected" if await gateway.ping() else "disconnected"

    try:
        await redis_client.ping()
        redis_status = "connected"
    except Exception:
        redis_status = "disconnected"

    return {
        "status": "healthy",
        "backend": backend_status,
        "redis": redis_status,
        "environment": settings.ENVIRONMENT,
    }
