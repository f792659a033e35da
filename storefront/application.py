"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.routes import include_api_routes
from storefront.config import settings
from storefront.services.gateway.rest_gateway import close_gateway
from storefront.services.search.session_registry import get_session_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    if not settings.backend_configured:
        logger.warning("BACKEND_API_KEY is not set; backend requests are anonymous")

    yield

    get_session_registry().close_all()
    await close_gateway()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Storefront Discovery",
        description="Catalog filtering, search, wishlist and analytics service",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
