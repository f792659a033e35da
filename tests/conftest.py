"""Pytest configuration and fixtures for the storefront service."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from storefront.models.product import Category, Product, ProductSummary
from storefront.models.site import AboutContent, BusinessSettings
from storefront.models.wishlist import WishlistItem
from storefront.services.gateway.base import GatewayError, RepositoryGateway, Unavailable
from storefront.services.gateway.rest_gateway import get_gateway
from storefront.services.search.scheduler import Scheduler, get_scheduler
from storefront.services.search.session_registry import (
    SearchSessionRegistry,
    get_session_registry,
)
from storefront.services.storage.redis_client import get_redis_client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


def make_product(product_id: int, **overrides: Any) -> Product:
    data: dict[str, Any] = {
        "id": product_id,
        "name": f"Product {product_id}",
        "description": "Test product",
        "category": "Shorts",
        "colors": ["Black"],
        "sizes": ["M"],
        "images": [],
        "price": 25.0,
        "stock": 10,
        "rating": 4.5,
        "is_featured": False,
        "created_at": "2024-01-01T00:00:00+00:00",
    }
    data.update(overrides)
    return Product(**data)


class _ManualTimer:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Virtual clock in whole milliseconds; timers fire only on ``advance``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._timers: list[_ManualTimer] = []

    def now(self) -> float:
        return self.now_ms / 1000

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now_ms + round(delay * 1000), callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._timers if not timer.cancelled)

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = [t for t in self._timers if not t.cancelled and t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due_ms)
            self._timers.remove(timer)
            self.now_ms = timer.due_ms
            timer.callback()
        self.now_ms = target
        self._timers = [t for t in self._timers if not t.cancelled]


class FakeGateway(RepositoryGateway):
    """In-memory gateway recording every call made against it."""

    def __init__(self) -> None:
        self.products: list[Product] = []
        self.inactive_products: list[Product] = []
        self.categories: list[Category] = []
        self.wishlist_rows: list[WishlistItem] = []
        self.view_counts: dict[int, int] | Unavailable = {}
        self.wishlist_counts: dict[int, int] | Unavailable | None = None
        self.table_counts: dict[str, int | Unavailable] = {}
        self.business_settings = BusinessSettings()
        self.about: AboutContent | None = None

        self.search_handler: Callable[[str], Awaitable[list[ProductSummary]]] | None = None
        self.search_calls: list[str] = []
        self.mutations: list[tuple[str, str, int]] = []
        self.wishlist_reads = 0
        self.fail_wishlist_reads = False
        self.fail_mutations = False
        self.tracked_views: list[tuple[int, str | None]] = []
        self.tracked_visits: list[tuple[str, str | None]] = []
        self.online = True

    async def list_products(self, filters=None, *, include_inactive=False):
        await asyncio.sleep(0)
        if include_inactive:
            return [*self.products, *self.inactive_products]
        return list(self.products)

    async def get_product(self, product_id):
        return next((p for p in self.products if p.id == product_id), None)

    async def get_featured_products(self, limit):
        return [p for p in self.products if p.is_featured][:limit]

    async def list_categories(self):
        return list(self.categories)

    async def search_products(self, text):
        self.search_calls.append(text)
        if self.search_handler is not None:
            return await self.search_handler(text)
        needle = text.lower()
        return [
            ProductSummary(id=p.id, name=p.name, price=p.price, category=p.category)
            for p in self.products
            if needle in p.name.lower()
        ][:10]

    async def get_wishlist(self, user_id):
        await asyncio.sleep(0)
        self.wishlist_reads += 1
        if self.fail_wishlist_reads:
            raise GatewayError("backend unavailable", status_code=503)
        return [row for row in self.wishlist_rows if row.user_id == user_id]

    async def add_to_wishlist(self, user_id, product_id):
        await asyncio.sleep(0)
        self.mutations.append(("add", user_id, product_id))
        if self.fail_mutations:
            raise GatewayError("insert rejected", code="42501", status_code=403)
        row = WishlistItem(
            id=f"wl-{len(self.mutations)}", user_id=user_id, product_id=product_id
        )
        self.wishlist_rows.append(row)
        return row

    async def remove_from_wishlist(self, user_id, product_id):
        await asyncio.sleep(0)
        self.mutations.append(("remove", user_id, product_id))
        if self.fail_mutations:
            raise GatewayError("delete rejected", code="42501", status_code=403)
        self.wishlist_rows = [
            row
            for row in self.wishlist_rows
            if not (row.user_id == user_id and row.product_id == product_id)
        ]

    async def get_product_view_counts(self, window_days):
        return self.view_counts

    async def get_wishlist_counts(self):
        if self.wishlist_counts is not None:
            return self.wishlist_counts
        return dict(Counter(row.product_id for row in self.wishlist_rows))

    async def count_rows(self, table, filters=None):
        return self.table_counts.get(table, 0)

    async def sum_active_prices(self):
        return sum(p.price or 0 for p in self.products)

    async def track_product_view(self, product_id, user_id):
        self.tracked_views.append((product_id, user_id))

    async def track_website_visit(self, page_url, user_id):
        self.tracked_visits.append((page_url, user_id))

    async def get_business_settings(self):
        return self.business_settings

    async def get_about_content(self):
        return self.about

    async def ping(self):
        return self.online


@pytest.fixture()
def product_factory():
    return make_product


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def session_registry():
    registry = SearchSessionRegistry(max_sessions=10)
    yield registry
    registry.close_all()


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    client = fakeredis.FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()


@pytest_asyncio.fixture()
async def client(gateway, scheduler, session_registry, redis_client):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from storefront.main import app

    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    app.dependency_overrides[get_session_registry] = lambda: session_registry
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://testserver",
        ) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
