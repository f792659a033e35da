"""Engagement ranking and category rollups for the admin dashboard."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Awaitable, Iterable, Mapping
from typing import TypeVar

from storefront.config import settings
from storefront.models.analytics import (
    AnalyticsSnapshot,
    CategoryViews,
    EngagementRecord,
    LiveTotals,
)
from storefront.models.product import Category, Product
from storefront.services.gateway.base import RepositoryGateway, Unavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")

WISHLIST_WEIGHT = 2


def engagement_score(views: int, wishlists: int) -> int:
    return views + WISHLIST_WEIGHT * wishlists


def rank_engagement(
    products: Iterable[Product],
    view_counts: Mapping[int, int],
    wishlist_counts: Mapping[int, int],
) -> list[EngagementRecord]:
    """Join products with their event counts, most engaging first."""

    records = []
    for product in products:
        views = view_counts.get(product.id, 0)
        wishlists = wishlist_counts.get(product.id, 0)
        records.append(
            EngagementRecord(
                product_id=product.id,
                name=product.name,
                category=product.category,
                price=product.price,
                stock=product.stock,
                rating=product.rating,
                review_count=product.review_count,
                views=views,
                wishlists=wishlists,
                engagement=engagement_score(views, wishlists),
            )
        )
    return sorted(records, key=lambda record: record.engagement, reverse=True)


def rollup_category_views(
    categories: Iterable[Category],
    products: Iterable[Product],
    view_counts: Mapping[int, int],
) -> list[CategoryViews]:
    """Sum views per category.

    Views are attributed to the category a product has *now*; events
    recorded before a product moved category count toward its new one.
    """

    views_by_category: Counter[str] = Counter()
    for product in products:
        views_by_category[product.category] += view_counts.get(product.id, 0)

    return [
        CategoryViews(
            id=category.id,
            name=category.name,
            product_count=category.product_count or 0,
            views=views_by_category.get(category.name, 0),
        )
        for category in categories
    ]


def _counts_or_zero(
    result: Mapping[int, int] | Unavailable,
    unavailable: list[str],
) -> Mapping[int, int]:
    if isinstance(result, Unavailable):
        unavailable.append(result.source)
        return {}
    return result


def _total_or_zero(result: int | Unavailable, unavailable: list[str]) -> int:
    if isinstance(result, Unavailable):
        if result.source not in unavailable:
            unavailable.append(result.source)
        return 0
    return result


class AnalyticsAggregator:
    """Builds a complete dashboard snapshot from gateway data."""

    def __init__(
        self,
        gateway: RepositoryGateway,
        *,
        window_days: int | None = None,
        conversion_rate: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._window_days = window_days or settings.ANALYTICS_WINDOW_DAYS
        self._conversion_rate = (
            settings.ESTIMATED_CONVERSION_RATE
            if conversion_rate is None
            else conversion_rate
        )

    async def build_snapshot(self) -> AnalyticsSnapshot:
        """Recompute every figure.

        Each dashboard section degrades on its own: a failing source empties
        only the sections that read from it.
        """

        gateway = self._gateway
        view_result, wishlist_result = await asyncio.gather(
            self._guarded(
                "view counts", gateway.get_product_view_counts(self._window_days), {}
            ),
            self._guarded("wishlist counts", gateway.get_wishlist_counts(), {}),
        )

        unavailable: list[str] = []
        view_counts = _counts_or_zero(view_result, unavailable)
        wishlist_counts = _counts_or_zero(wishlist_result, unavailable)

        products, categories, totals = await asyncio.gather(
            self._guarded(
                "product engagement",
                self._product_engagement(view_counts, wishlist_counts),
                [],
            ),
            self._guarded("category views", self._category_views(view_counts), []),
            self._guarded("live totals", self._live_totals(unavailable), LiveTotals()),
        )
        snapshot = AnalyticsSnapshot(
            totals=totals,
            products=products,
            categories=categories,
            window_days=self._window_days,
            unavailable_sources=unavailable,
        )
        logger.info(
            "Built analytics snapshot",
            extra={
                "products": len(snapshot.products),
                "categories": len(snapshot.categories),
                "unavailable": unavailable,
            },
        )
        return snapshot

    @staticmethod
    async def _guarded(section: str, awaitable: Awaitable[T], fallback: T) -> T:
        try:
            return await awaitable
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Error building %s analytics", section)
            return fallback

    async def _product_engagement(
        self,
        view_counts: Mapping[int, int],
        wishlist_counts: Mapping[int, int],
    ) -> list[EngagementRecord]:
        products = await self._gateway.list_products()
        return rank_engagement(products, view_counts, wishlist_counts)

    async def _category_views(self, view_counts: Mapping[int, int]) -> list[CategoryViews]:
        # Inactive products still carry views for their current category.
        categories, products = await asyncio.gather(
            self._gateway.list_categories(),
            self._gateway.list_products(include_inactive=True),
        )
        return rollup_category_views(categories, products, view_counts)

    async def _live_totals(self, unavailable: list[str]) -> LiveTotals:
        gateway = self._gateway
        products, customers, wishlists, visits, price_sum = await asyncio.gather(
            gateway.count_rows("products", {"is_active": "eq.true"}),
            gateway.count_rows("profiles"),
            gateway.count_rows("wishlists"),
            gateway.count_rows("website_visits"),
            gateway.sum_active_prices(),
        )
        return LiveTotals(
            total_products=_total_or_zero(products, unavailable),
            total_customers=_total_or_zero(customers, unavailable),
            total_wishlists=_total_or_zero(wishlists, unavailable),
            total_visits=_total_or_zero(visits, unavailable),
            estimated_revenue=round(price_sum * self._conversion_rate),
        )
