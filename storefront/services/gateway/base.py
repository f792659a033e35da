"""Repository gateway abstraction over the hosted backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from storefront.models.product import Category, Product, ProductSummary
from storefront.models.site import AboutContent, BusinessSettings
from storefront.models.wishlist import WishlistItem


class GatewayError(RuntimeError):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True)
class Unavailable:
    """Marker returned for data sources that are not provisioned."""

    source: str
    reason: str = "not provisioned"


class RepositoryGateway(ABC):
    """Read and write access to catalog, wishlist and analytics data.

    Catalog reads fail open: errors are logged by the implementation and
    surface as empty values. Wishlist calls raise ``GatewayError`` so the
    caller can decide how to degrade. Analytics sources that do not exist
    return ``Unavailable`` instead of raising.
    """

    @abstractmethod
    async def list_products(
        self,
        filters: dict[str, Any] | None = None,
        *,
        include_inactive: bool = False,
    ) -> list[Product]:
        """Return products matching server-side filters."""

    @abstractmethod
    async def get_product(self, product_id: int) -> Product | None:
        """Return a single active product or None."""

    @abstractmethod
    async def get_featured_products(self, limit: int) -> list[Product]:
        """Return the newest featured products."""

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """Return active categories ordered by name."""

    @abstractmethod
    async def search_products(self, text: str) -> list[ProductSummary]:
        """Return a capped list of summaries matching the free text.

        Raises ``GatewayError``; the search controller turns it into an
        error state with empty results.
        """

    @abstractmethod
    async def get_wishlist(self, user_id: str) -> list[WishlistItem]:
        """Return the user's wishlist rows, newest first."""

    @abstractmethod
    async def add_to_wishlist(self, user_id: str, product_id: int) -> WishlistItem:
        """Insert a wishlist row."""

    @abstractmethod
    async def remove_from_wishlist(self, user_id: str, product_id: int) -> None:
        """Delete a wishlist row."""

    @abstractmethod
    async def get_product_view_counts(
        self, window_days: int
    ) -> dict[int, int] | Unavailable:
        """Count product views per product within the trailing window."""

    @abstractmethod
    async def get_wishlist_counts(self) -> dict[int, int] | Unavailable:
        """Count all-time wishlist rows per product."""

    @abstractmethod
    async def count_rows(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
    ) -> int | Unavailable:
        """Return the exact row count of a table."""

    @abstractmethod
    async def sum_active_prices(self) -> float:
        """Return the sum of prices across active products."""

    @abstractmethod
    async def track_product_view(self, product_id: int, user_id: str | None) -> None:
        """Record a product detail view; never raises."""

    @abstractmethod
    async def track_website_visit(self, page_url: str, user_id: str | None) -> None:
        """Record a page visit; never raises."""

    @abstractmethod
    async def get_business_settings(self) -> BusinessSettings:
        """Return store settings, falling back to defaults."""

    @abstractmethod
    async def get_about_content(self) -> AboutContent | None:
        """Return the about page content if configured."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True when the backend answers."""
