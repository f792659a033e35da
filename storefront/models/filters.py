"""Transient filter state posted by the catalog pages."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PriceBracket(str, Enum):
    ALL = "all"
    UNDER_30 = "under-30"
    BETWEEN_30_50 = "30-50"
    OVER_50 = "over-50"


class SortKey(str, Enum):
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING_DESC = "rating-desc"
    NEWEST = "newest"


ALL_CATEGORIES = "all"


class FilterState(BaseModel):
    """Value object describing the active catalog filters."""

    model_config = {"frozen": True}

    search: str = ""
    category: str = Field(ALL_CATEGORIES, description="Category name or 'all'")
    price: PriceBracket = PriceBracket.ALL
    sort: SortKey = SortKey.FEATURED
    colors: frozenset[str] = Field(
        default_factory=frozenset,
        description="Selected colors; membership only",
    )
