"""Wishlist membership for the current identity."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from storefront.models.identity import Identity
from storefront.models.wishlist import (
    Notice,
    ToggleOutcome,
    ToggleResult,
    WishlistItem,
    WishlistResponse,
)
from storefront.services.gateway.base import GatewayError, RepositoryGateway

logger = logging.getLogger(__name__)


class ToggleLocks:
    """Keyed locks serializing toggles of the same (user, product) pair."""

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[tuple[str, int], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @asynccontextmanager
    async def hold(self, user_id: str, product_id: int) -> AsyncIterator[None]:
        key = (user_id, product_id)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield


_toggle_locks = ToggleLocks()


def get_toggle_locks() -> ToggleLocks:
    return _toggle_locks


class WishlistViewModel:
    """Membership test, count and toggle intent backed by the gateway.

    Membership is always whatever the gateway reported on the last fetch.
    Mutations are never patched in locally; a successful add or remove is
    followed by a full refetch.
    """

    def __init__(
        self,
        gateway: RepositoryGateway,
        identity: Identity | None,
        *,
        locks: ToggleLocks | None = None,
    ) -> None:
        self._gateway = gateway
        self._identity = identity
        self._locks = locks or _toggle_locks
        self._items: list[WishlistItem] = []
        self._membership: frozenset[int] = frozenset()

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def items(self) -> list[WishlistItem]:
        return list(self._items)

    @property
    def membership(self) -> frozenset[int]:
        return self._membership

    @property
    def count(self) -> int:
        return len(self._membership)

    def is_wishlisted(self, product_id: int) -> bool:
        return product_id in self._membership

    def to_response(self) -> WishlistResponse:
        return WishlistResponse(
            product_ids=[item.product_id for item in self._items],
            count=self.count,
            items=self.items,
        )

    async def refresh(self) -> None:
        """Re-read membership; errors degrade to an empty wishlist."""

        if self._identity is None:
            self._set_items([])
            return
        try:
            items = await self._gateway.get_wishlist(self._identity.user_id)
        except GatewayError as exc:
            logger.warning(
                "Error fetching wishlist: %s",
                exc.message,
                extra={"user_id": self._identity.user_id, "code": exc.code},
            )
            items = []
        self._set_items(items)

    async def toggle(self, product_id: int, *, refresh_first: bool = False) -> ToggleResult:
        """Add or remove ``product_id`` depending on current membership.

        With ``refresh_first`` the membership is re-read while holding the
        per-product lock, so the decision reflects any toggle that settled
        just before this one.
        """

        if self._identity is None:
            return self._result(
                ToggleOutcome.AUTH_REQUIRED,
                product_id,
                Notice(
                    title="Sign in required",
                    description="Please sign in to add items to your wishlist",
                    variant="destructive",
                ),
            )

        user_id = self._identity.user_id
        async with self._locks.hold(user_id, product_id):
            if refresh_first:
                await self.refresh()
            if self.is_wishlisted(product_id):
                return await self._remove(user_id, product_id)
            return await self._add(user_id, product_id)

    async def _add(self, user_id: str, product_id: int) -> ToggleResult:
        try:
            await self._gateway.add_to_wishlist(user_id, product_id)
        except GatewayError as exc:
            logger.error(
                "Error adding to wishlist: %s",
                exc.message,
                extra={"user_id": user_id, "product_id": product_id},
            )
            return self._result(
                ToggleOutcome.FAILED,
                product_id,
                Notice(
                    title="Error",
                    description="Failed to add item to wishlist",
                    variant="destructive",
                ),
            )
        await self.refresh()
        return self._result(
            ToggleOutcome.ADDED,
            product_id,
            Notice(
                title="Added to wishlist",
                description="Item has been added to your wishlist",
            ),
        )

    async def _remove(self, user_id: str, product_id: int) -> ToggleResult:
        try:
            await self._gateway.remove_from_wishlist(user_id, product_id)
        except GatewayError as exc:
            logger.error(
                "Error removing from wishlist: %s",
                exc.message,
                extra={"user_id": user_id, "product_id": product_id},
            )
            return self._result(
                ToggleOutcome.FAILED,
                product_id,
                Notice(
                    title="Error",
                    description="Failed to remove item from wishlist",
                    variant="destructive",
                ),
            )
        await self.refresh()
        return self._result(
            ToggleOutcome.REMOVED,
            product_id,
            Notice(
                title="Removed from wishlist",
                description="Item has been removed from your wishlist",
            ),
        )

    def _set_items(self, items: list[WishlistItem]) -> None:
        self._items = list(items)
        self._membership = frozenset(item.product_id for item in items)

    def _result(
        self,
        outcome: ToggleOutcome,
        product_id: int,
        notice: Notice | None,
    ) -> ToggleResult:
        return ToggleResult(
            outcome=outcome,
            product_id=product_id,
            wishlisted=self.is_wishlisted(product_id),
            count=self.count,
            notice=notice,
        )
