"""Catalog routes: filtered listing, featured products and detail pages."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from storefront.api.dependencies import IdentityDependency
from storefront.config import settings
from storefront.models.filters import ALL_CATEGORIES, FilterState, PriceBracket, SortKey
from storefront.models.product import Category, Product, ProductListResponse
from storefront.services.catalog.filter_engine import apply_filters, available_colors
from storefront.services.gateway.rest_gateway import GatewayDependency

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


@router.get(
    "/products",
    response_model=ProductListResponse,
    summary="List active products filtered and sorted for display",
)
async def list_products(
    gateway: GatewayDependency,
    search: str = "",
    category: str = ALL_CATEGORIES,
    price: PriceBracket = PriceBracket.ALL,
    sort: SortKey = SortKey.FEATURED,
    colors: Annotated[list[str] | None, Query()] = None,
) -> ProductListResponse:
    state = FilterState(
        search=search,
        category=category,
        price=price,
        sort=sort,
        colors=frozenset(colors or ()),
    )
    products = await gateway.list_products()
    items = apply_filters(products, state)
    logger.debug(
        "Filtered catalog",
        extra={"total": len(products), "shown": len(items), "sort": sort.value},
    )
    return ProductListResponse(
        items=items,
        total=len(items),
        available_colors=available_colors(products),
    )


@router.get(
    "/products/featured",
    response_model=list[Product],
    summary="Newest featured products for the home page",
)
async def list_featured_products(gateway: GatewayDependency) -> list[Product]:
    return await gateway.get_featured_products(settings.FEATURED_PRODUCTS_LIMIT)


@router.get(
    "/products/{product_id}",
    response_model=Product,
    summary="Fetch a single active product",
)
async def get_product(product_id: int, gateway: GatewayDependency) -> Product:
    product = await gateway.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post(
    "/products/{product_id}/views",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record a product detail view",
)
async def track_product_view(
    product_id: int,
    gateway: GatewayDependency,
    identity: IdentityDependency,
) -> dict[str, str]:
    await gateway.track_product_view(
        product_id, identity.user_id if identity else None
    )
    return {"status": "accepted"}


@router.get(
    "/categories",
    response_model=list[Category],
    summary="List active categories",
)
async def list_categories(gateway: GatewayDependency) -> list[Category]:
    return await gateway.list_categories()
