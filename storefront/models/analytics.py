"""Models describing the admin analytics snapshot."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class EngagementRecord(BaseModel):
    """Derived engagement figures for a single product."""

    product_id: int
    name: str
    category: str
    price: float | None = None
    stock: int = 0
    rating: float = 0.0
    review_count: int = 0
    views: int = Field(0, ge=0, description="Views within the trailing window")
    wishlists: int = Field(0, ge=0, description="All-time wishlist rows")
    engagement: int = Field(0, ge=0, description="views + 2 * wishlists")


class CategoryViews(BaseModel):
    """Views within the window attributed to a category."""

    id: int | None = None
    name: str
    product_count: int = 0
    views: int = Field(0, ge=0)


class LiveTotals(BaseModel):
    """Headline figures shown on the dashboard overview cards."""

    total_products: int = 0
    total_customers: int = 0
    total_wishlists: int = 0
    total_visits: int = 0
    estimated_revenue: int = 0


class AnalyticsSnapshot(BaseModel):
    """Everything the admin dashboard renders, recomputed wholesale."""

    totals: LiveTotals = Field(default_factory=LiveTotals)
    products: list[EngagementRecord] = Field(default_factory=list)
    categories: list[CategoryViews] = Field(default_factory=list)
    window_days: int = 30
    unavailable_sources: list[str] = Field(
        default_factory=list,
        description="Backing tables that are not provisioned yet",
    )
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
