"""Tests for the wishlist view model."""

from __future__ import annotations

import asyncio

import pytest

from storefront.models.identity import Identity
from storefront.models.wishlist import ToggleOutcome, WishlistItem
from storefront.services.wishlist.view_model import ToggleLocks, WishlistViewModel

USER = Identity(user_id="user-1", email="shopper@example.com")


@pytest.fixture()
def locks():
    return ToggleLocks()


def _row(product_id: int, user_id: str = "user-1") -> WishlistItem:
    return WishlistItem(id=f"row-{user_id}-{product_id}", user_id=user_id, product_id=product_id)


@pytest.mark.asyncio
async def test_anonymous_toggle_requires_sign_in_without_mutation(gateway, locks):
    view_model = WishlistViewModel(gateway, None, locks=locks)

    result = await view_model.toggle(7)

    assert result.outcome is ToggleOutcome.AUTH_REQUIRED
    assert result.wishlisted is False
    assert result.notice is not None
    assert result.notice.title == "Sign in required"
    assert gateway.mutations == []
    assert gateway.wishlist_reads == 0


@pytest.mark.asyncio
async def test_anonymous_refresh_is_empty(gateway, locks):
    gateway.wishlist_rows = [_row(1)]
    view_model = WishlistViewModel(gateway, None, locks=locks)

    await view_model.refresh()

    assert view_model.count == 0
    assert gateway.wishlist_reads == 0


@pytest.mark.asyncio
async def test_refresh_reads_only_current_user_rows(gateway, locks):
    gateway.wishlist_rows = [_row(1), _row(2), _row(3, user_id="someone-else")]
    view_model = WishlistViewModel(gateway, USER, locks=locks)

    await view_model.refresh()

    assert view_model.membership == frozenset({1, 2})
    assert view_model.count == 2
    assert view_model.is_wishlisted(1)
    assert not view_model.is_wishlisted(3)
    assert view_model.to_response().product_ids == [1, 2]


@pytest.mark.asyncio
async def test_toggle_adds_then_refetches(gateway, locks):
    view_model = WishlistViewModel(gateway, USER, locks=locks)
    await view_model.refresh()
    reads_before = gateway.wishlist_reads

    result = await view_model.toggle(4)

    assert result.outcome is ToggleOutcome.ADDED
    assert result.wishlisted is True
    assert result.count == 1
    assert result.notice.title == "Added to wishlist"
    assert gateway.mutations == [("add", "user-1", 4)]
    assert gateway.wishlist_reads == reads_before + 1


@pytest.mark.asyncio
async def test_toggle_removes_existing_item(gateway, locks):
    gateway.wishlist_rows = [_row(4), _row(5)]
    view_model = WishlistViewModel(gateway, USER, locks=locks)
    await view_model.refresh()

    result = await view_model.toggle(4)

    assert result.outcome is ToggleOutcome.REMOVED
    assert result.wishlisted is False
    assert result.notice.description == "Item has been removed from your wishlist"
    assert gateway.mutations == [("remove", "user-1", 4)]
    assert view_model.membership == frozenset({5})


@pytest.mark.asyncio
async def test_count_matches_backend_not_local_guess(gateway, locks):
    view_model = WishlistViewModel(gateway, USER, locks=locks)
    await view_model.refresh()

    # Another device adds a product while this one toggles a different one.
    gateway.wishlist_rows.append(_row(9))
    result = await view_model.toggle(2)

    assert result.count == 2
    assert view_model.membership == frozenset({2, 9})


@pytest.mark.asyncio
async def test_failed_mutation_leaves_membership_unchanged(gateway, locks):
    gateway.wishlist_rows = [_row(3)]
    gateway.fail_mutations = True
    view_model = WishlistViewModel(gateway, USER, locks=locks)
    await view_model.refresh()

    added = await view_model.toggle(8)
    removed = await view_model.toggle(3)

    assert added.outcome is ToggleOutcome.FAILED
    assert added.notice.description == "Failed to add item to wishlist"
    assert added.notice.variant == "destructive"
    assert added.wishlisted is False
    assert removed.outcome is ToggleOutcome.FAILED
    assert removed.notice.description == "Failed to remove item from wishlist"
    assert removed.wishlisted is True
    assert view_model.membership == frozenset({3})


@pytest.mark.asyncio
async def test_fetch_error_degrades_to_empty_wishlist(gateway, locks):
    gateway.wishlist_rows = [_row(1)]
    view_model = WishlistViewModel(gateway, USER, locks=locks)
    await view_model.refresh()
    assert view_model.count == 1

    gateway.fail_wishlist_reads = True
    await view_model.refresh()

    assert view_model.count == 0
    assert view_model.items == []


@pytest.mark.asyncio
async def test_concurrent_toggles_for_same_product_are_serialized(gateway, locks):
    first = WishlistViewModel(gateway, USER, locks=locks)
    second = WishlistViewModel(gateway, USER, locks=locks)

    results = await asyncio.gather(
        first.toggle(6, refresh_first=True),
        second.toggle(6, refresh_first=True),
    )

    assert [r.outcome for r in results] == [ToggleOutcome.ADDED, ToggleOutcome.REMOVED]
    assert gateway.mutations == [("add", "user-1", 6), ("remove", "user-1", 6)]
    assert gateway.wishlist_rows == []
