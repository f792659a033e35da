"""Wishlist rows and toggle outcomes."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from storefront.models.product import Product


class WishlistItem(BaseModel):
    """Row of the wishlists table, optionally joined with its product."""

    id: str
    user_id: str
    product_id: int
    created_at: str | None = None
    product: Product | None = None


class ToggleOutcome(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    AUTH_REQUIRED = "auth_required"
    FAILED = "failed"


class Notice(BaseModel):
    """User-visible notification raised by a wishlist action."""

    title: str
    description: str
    variant: Literal["default", "destructive"] = "default"


class ToggleResult(BaseModel):
    """Response body for POST /wishlist/{product_id}/toggle."""

    outcome: ToggleOutcome
    product_id: int
    wishlisted: bool
    count: int = Field(..., ge=0)
    notice: Notice | None = None


class WishlistResponse(BaseModel):
    """Response body for GET /wishlist."""

    product_ids: list[int] = Field(default_factory=list)
    count: int = Field(0, ge=0)
    items: list[WishlistItem] = Field(default_factory=list)
