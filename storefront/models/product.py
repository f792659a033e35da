"""Catalog read models returned by the backend gateway."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator


class Product(BaseModel):
    """Immutable snapshot of an active catalog product."""

    model_config = {"frozen": True}

    id: int = Field(..., description="Unique identifier of the product")
    name: str
    description: str = ""
    category: str = ""
    colors: list[str] = Field(default_factory=list)
    sizes: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    price: float | None = Field(
        None,
        description="Selling price; rows with a missing price never match a bracket",
    )
    original_price: float | None = None
    stock: int = 0
    rating: float = 0.0
    review_count: int = 0
    features: list[str] = Field(default_factory=list)
    specifications: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True
    is_featured: bool = False
    created_at: str | None = Field(
        None,
        description="Raw creation timestamp as stored by the backend",
    )
    updated_at: str | None = None

    @field_validator("price", "original_price", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            amount = float(value)
        except (TypeError, ValueError):
            return None
        return amount if math.isfinite(amount) else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def discount_percentage(self) -> int:
        """Percentage saved against the original price, 0 when not discounted."""
        price = self.price
        original = self.original_price
        if price is None or original is None:
            return 0
        if not (math.isfinite(price) and math.isfinite(original)):
            return 0
        if original <= price or original <= 0:
            return 0
        return round((original - price) / original * 100)


class ProductSummary(BaseModel):
    """Projection returned by the header search box."""

    id: int
    name: str
    price: float | None = None
    images: list[str] = Field(default_factory=list)
    category: str = ""


class Category(BaseModel):
    """Product category shown in navigation and filters."""

    id: int | None = None
    name: str
    description: str | None = ""
    image: str | None = ""
    product_count: int | None = 0
    is_active: bool = True
    created_at: str | None = None


class ProductListResponse(BaseModel):
    """Filtered and sorted catalog view."""

    items: list[Product] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    available_colors: list[str] = Field(
        default_factory=list,
        description="Every color offered by the unfiltered catalog, sorted",
    )
