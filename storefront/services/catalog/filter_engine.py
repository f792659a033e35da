"""Pure filtering and sorting of an already-fetched product list."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime
from typing import Any

from storefront.models.filters import ALL_CATEGORIES, FilterState, PriceBracket, SortKey
from storefront.models.product import Product


def _finite_price(product: Product) -> float | None:
    price = product.price
    if price is None or not math.isfinite(price):
        return None
    return price


def matches_search(product: Product, search: str) -> bool:
    if not search:
        return True
    return search.lower() in product.name.lower()


def matches_category(product: Product, category: str) -> bool:
    return category == ALL_CATEGORIES or product.category == category


def matches_price(product: Product, bracket: PriceBracket) -> bool:
    if bracket is PriceBracket.ALL:
        return True
    price = _finite_price(product)
    if price is None:
        return False
    if bracket is PriceBracket.UNDER_30:
        return price < 30
    if bracket is PriceBracket.BETWEEN_30_50:
        return 30 <= price <= 50
    return price > 50


def matches_colors(product: Product, colors: frozenset[str]) -> bool:
    if not colors:
        return True
    return not colors.isdisjoint(product.colors)


def matches(product: Product, state: FilterState) -> bool:
    """Return True when the product satisfies every active filter."""
    return (
        matches_search(product, state.search)
        and matches_category(product, state.category)
        and matches_price(product, state.price)
        and matches_colors(product, state.colors)
    )


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _price_key(descending: bool) -> Callable[[Product], tuple[bool, float]]:
    def key(product: Product) -> tuple[bool, float]:
        price = _finite_price(product)
        if price is None:
            return (True, 0.0)
        return (False, -price if descending else price)

    return key


def _rating_key(product: Product) -> tuple[bool, float]:
    rating = product.rating
    if not math.isfinite(rating):
        return (True, 0.0)
    return (False, -rating)


def _newest_key(product: Product) -> tuple[bool, float]:
    created = parse_timestamp(product.created_at)
    if created is None:
        return (True, 0.0)
    return (False, -created.timestamp())


def _featured_key(product: Product) -> bool:
    # False sorts first, so featured products lead; the stable sort keeps
    # catalog order inside each tier.
    return not product.is_featured


_SORT_KEYS: dict[SortKey, Callable[[Product], Any]] = {
    SortKey.FEATURED: _featured_key,
    SortKey.PRICE_ASC: _price_key(descending=False),
    SortKey.PRICE_DESC: _price_key(descending=True),
    SortKey.RATING_DESC: _rating_key,
    SortKey.NEWEST: _newest_key,
}


def sort_products(products: Iterable[Product], sort: SortKey) -> list[Product]:
    """Return a new list ordered by ``sort``; ties keep their input order."""
    return sorted(products, key=_SORT_KEYS[sort])


def apply_filters(products: Sequence[Product], state: FilterState) -> list[Product]:
    """Filter then sort ``products`` for display. The input is not modified."""
    return sort_products((p for p in products if matches(p, state)), state.sort)


def available_colors(products: Iterable[Product]) -> list[str]:
    """Every color offered across ``products``, sorted for the filter panel."""
    return sorted({color for product in products for color in product.colors})
