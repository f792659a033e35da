"""PostgREST-backed implementation of the repository gateway."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any, TypeVar

import httpx
from fastapi import Depends
from pydantic import BaseModel, ValidationError

from storefront.config import settings
from storefront.models.filters import ALL_CATEGORIES, SortKey
from storefront.models.product import Category, Product, ProductSummary
from storefront.models.site import AboutContent, BusinessSettings
from storefront.models.wishlist import WishlistItem
from storefront.services.gateway.base import GatewayError, RepositoryGateway, Unavailable

logger = logging.getLogger(__name__)

# Postgres "undefined_table" and PostgREST "table not in schema cache".
UNDEFINED_TABLE_CODES = frozenset({"42P01", "PGRST205"})

_ORDER_BY_SORT = {
    SortKey.PRICE_ASC.value: "price.asc",
    SortKey.PRICE_DESC.value: "price.desc",
    SortKey.RATING_DESC.value: "rating.desc",
    SortKey.NEWEST.value: "created_at.desc",
}

# Characters with meaning inside PostgREST filter expressions.
_RESERVED_FILTER_CHARS = str.maketrans({c: " " for c in ",()*:\\\""})

Params = list[tuple[str, str]]
RowModel = TypeVar("RowModel", bound=BaseModel)


def _is_undefined_table(exc: GatewayError) -> bool:
    return exc.code in UNDEFINED_TABLE_CODES


def _sanitize_term(text: str) -> str:
    return " ".join(text.translate(_RESERVED_FILTER_CHARS).split())


class RestGateway(RepositoryGateway):
    """Gateway talking to the hosted backend's REST endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        search_limit: int | None = None,
    ) -> None:
        self._client = client
        self._search_limit = search_limit or settings.SEARCH_RESULT_LIMIT

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # transport helpers
    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: Params | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"/rest/v1/{table}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Backend request to {table} failed: {exc}") from exc

        if response.is_error:
            raise self._error_from(response)
        return response

    @staticmethod
    def _error_from(response: httpx.Response) -> GatewayError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or response.text or f"HTTP {response.status_code}"
        return GatewayError(
            message,
            code=body.get("code"),
            status_code=response.status_code,
        )

    async def _select(self, table: str, params: Params) -> list[dict[str, Any]]:
        response = await self._request("GET", table, params=params)
        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayError(
                f"Malformed response from {table}",
                status_code=response.status_code,
            ) from exc
        if isinstance(data, list):
            return data
        return [data] if data else []

    @staticmethod
    def _parse_rows(rows: list[dict[str, Any]], model: type[RowModel]) -> list[RowModel]:
        parsed: list[RowModel] = []
        for row in rows:
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed %s row %s: %s",
                    model.__name__,
                    row.get("id") if isinstance(row, dict) else None,
                    exc,
                )
        return parsed

    @classmethod
    def _parse_products(cls, rows: list[dict[str, Any]]) -> list[Product]:
        return cls._parse_rows(rows, Product)

    # ------------------------------------------------------------------
    # catalog
    # ------------------------------------------------------------------
    async def list_products(
        self,
        filters: dict[str, Any] | None = None,
        *,
        include_inactive: bool = False,
    ) -> list[Product]:
        filters = filters or {}
        params: Params = [("select", "*")]
        if not include_inactive:
            params.append(("is_active", "eq.true"))

        category = filters.get("category")
        if category and category != ALL_CATEGORIES:
            params.append(("category", f"eq.{category}"))
        search = _sanitize_term(filters.get("search") or "")
        if search:
            params.append(("name", f"ilike.*{search}*"))
        if filters.get("min_price") is not None:
            params.append(("price", f"gte.{filters['min_price']}"))
        if filters.get("max_price") is not None:
            params.append(("price", f"lte.{filters['max_price']}"))
        sort_by = filters.get("sort_by")
        if sort_by:
            params.append(("order", _ORDER_BY_SORT.get(str(sort_by), "created_at.desc")))

        try:
            rows = await self._select("products", params)
        except GatewayError as exc:
            logger.error("Error fetching products: %s", exc.message, extra={"code": exc.code})
            return []
        return self._parse_products(rows)

    async def get_product(self, product_id: int) -> Product | None:
        params: Params = [
            ("select", "*"),
            ("id", f"eq.{product_id}"),
            ("is_active", "eq.true"),
            ("limit", "1"),
        ]
        try:
            rows = await self._select("products", params)
        except GatewayError as exc:
            logger.error("Error fetching product %s: %s", product_id, exc.message)
            return None
        products = self._parse_products(rows)
        return products[0] if products else None

    async def get_featured_products(self, limit: int) -> list[Product]:
        params: Params = [
            ("select", "*"),
            ("is_active", "eq.true"),
            ("is_featured", "eq.true"),
            ("order", "created_at.desc"),
            ("limit", str(limit)),
        ]
        try:
            rows = await self._select("products", params)
        except GatewayError as exc:
            logger.error("Error fetching featured products: %s", exc.message)
            return []
        return self._parse_products(rows)

    async def list_categories(self) -> list[Category]:
        params: Params = [
            ("select", "*"),
            ("is_active", "eq.true"),
            ("order", "name.asc"),
        ]
        try:
            rows = await self._select("categories", params)
        except GatewayError as exc:
            logger.error("Error fetching categories: %s", exc.message)
            return []
        return self._parse_rows(rows, Category)

    async def search_products(self, text: str) -> list[ProductSummary]:
        term = _sanitize_term(text)
        if not term:
            return []
        pattern = f"*{term}*"
        params: Params = [
            ("select", "id,name,price,images,category"),
            ("is_active", "eq.true"),
            (
                "or",
                f"(name.ilike.{pattern},description.ilike.{pattern},"
                f"category.ilike.{pattern})",
            ),
            ("limit", str(self._search_limit)),
        ]
        rows = await self._select("products", params)
        return self._parse_rows(rows, ProductSummary)

    # ------------------------------------------------------------------
    # wishlist
    # ------------------------------------------------------------------
    async def get_wishlist(self, user_id: str) -> list[WishlistItem]:
        params: Params = [
            ("select", "*,product:products(*)"),
            ("user_id", f"eq.{user_id}"),
            ("order", "created_at.desc"),
        ]
        rows = await self._select("wishlists", params)
        try:
            return [WishlistItem.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise GatewayError(f"Malformed wishlist rows: {exc}") from exc

    async def add_to_wishlist(self, user_id: str, product_id: int) -> WishlistItem:
        response = await self._request(
            "POST",
            "wishlists",
            json=[{"user_id": user_id, "product_id": product_id}],
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        if not rows:
            raise GatewayError("Wishlist row was created but no data was returned")
        return WishlistItem.model_validate(rows[0])

    async def remove_from_wishlist(self, user_id: str, product_id: int) -> None:
        await self._request(
            "DELETE",
            "wishlists",
            params=[
                ("user_id", f"eq.{user_id}"),
                ("product_id", f"eq.{product_id}"),
            ],
        )

    # ------------------------------------------------------------------
    # analytics
    # ------------------------------------------------------------------
    async def _count_by_product(
        self, table: str, params: Params
    ) -> dict[int, int] | Unavailable:
        try:
            rows = await self._select(table, [("select", "product_id"), *params])
        except GatewayError as exc:
            if _is_undefined_table(exc):
                logger.info("%s table does not exist, counting zero", table)
                return Unavailable(source=table)
            logger.warning("Error reading %s: %s", table, exc.message)
            return {}
        return dict(
            Counter(row["product_id"] for row in rows if row.get("product_id") is not None)
        )

    async def get_product_view_counts(
        self, window_days: int
    ) -> dict[int, int] | Unavailable:
        since = datetime.now(UTC) - timedelta(days=window_days)
        return await self._count_by_product(
            "product_views", [("viewed_at", f"gte.{since.isoformat()}")]
        )

    async def get_wishlist_counts(self) -> dict[int, int] | Unavailable:
        return await self._count_by_product("wishlists", [])

    async def count_rows(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
    ) -> int | Unavailable:
        params: Params = [("select", "id"), ("limit", "1")]
        params.extend((key, str(value)) for key, value in (filters or {}).items())
        try:
            response = await self._request(
                "GET",
                table,
                params=params,
                headers={"Prefer": "count=exact"},
            )
        except GatewayError as exc:
            if _is_undefined_table(exc):
                return Unavailable(source=table)
            logger.warning("Error counting %s: %s", table, exc.message)
            return 0
        content_range = response.headers.get("content-range", "")
        _, _, total = content_range.partition("/")
        return int(total) if total.isdigit() else 0

    async def sum_active_prices(self) -> float:
        try:
            rows = await self._select(
                "products", [("select", "price"), ("is_active", "eq.true")]
            )
        except GatewayError as exc:
            logger.warning("Error summing product prices: %s", exc.message)
            return 0.0
        total = 0.0
        for row in rows:
            try:
                total += float(row.get("price") or 0)
            except (TypeError, ValueError):
                continue
        return total

    async def _track(self, table: str, row: dict[str, Any]) -> None:
        try:
            await self._request("POST", table, json=[row])
        except GatewayError as exc:
            if _is_undefined_table(exc):
                logger.info("%s table does not exist, skipping tracking", table)
                return
            logger.info("Error tracking %s: %s", table, exc.message)

    async def track_product_view(self, product_id: int, user_id: str | None) -> None:
        row: dict[str, Any] = {"product_id": product_id}
        if user_id:
            row["user_id"] = user_id
        await self._track("product_views", row)

    async def track_website_visit(self, page_url: str, user_id: str | None) -> None:
        row: dict[str, Any] = {"page_url": page_url}
        if user_id:
            row["user_id"] = user_id
        await self._track("website_visits", row)

    # ------------------------------------------------------------------
    # site content
    # ------------------------------------------------------------------
    async def get_business_settings(self) -> BusinessSettings:
        try:
            rows = await self._select(
                "business_settings", [("select", "*"), ("id", "eq.1"), ("limit", "1")]
            )
        except GatewayError as exc:
            logger.warning("Error fetching business settings, using defaults: %s", exc.message)
            return BusinessSettings()
        parsed = self._parse_rows(rows[:1], BusinessSettings)
        return parsed[0] if parsed else BusinessSettings()

    async def get_about_content(self) -> AboutContent | None:
        try:
            rows = await self._select(
                "about_content", [("select", "*"), ("id", "eq.1"), ("limit", "1")]
            )
        except GatewayError as exc:
            logger.error("Error fetching about content: %s", exc.message)
            return None
        parsed = self._parse_rows(rows[:1], AboutContent)
        return parsed[0] if parsed else None

    async def ping(self) -> bool:
        try:
            await self._select("products", [("select", "id"), ("limit", "1")])
        except GatewayError as exc:
            logger.error("Database connection test failed: %s", exc.message)
            return False
        return True


def create_backend_client() -> httpx.AsyncClient:
    """Build the HTTP client used to reach the backend."""

    headers = {"Accept": "application/json"}
    if settings.BACKEND_API_KEY:
        headers["apikey"] = settings.BACKEND_API_KEY
        headers["Authorization"] = f"Bearer {settings.BACKEND_API_KEY}"
    return httpx.AsyncClient(
        base_url=settings.BACKEND_URL,
        headers=headers,
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
    )


_gateway: RestGateway | None = None


def get_gateway() -> RepositoryGateway:
    """FastAPI dependency returning the process-wide gateway."""

    global _gateway
    if _gateway is None:
        _gateway = RestGateway(create_backend_client())
    return _gateway


async def close_gateway() -> None:
    global _gateway
    if _gateway is not None:
        await _gateway.aclose()
        _gateway = None


GatewayDependency = Annotated[RepositoryGateway, Depends(get_gateway)]
