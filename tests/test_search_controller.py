"""Tests for the debounced incremental search controller."""

from __future__ import annotations

import asyncio
import logging

import pytest

from storefront.models.product import ProductSummary
from storefront.models.search import SearchStatus
from storefront.services.gateway.base import GatewayError
from storefront.services.search.controller import (
    IncrementalSearchController,
    SearchSessionClosed,
)
from storefront.services.search.session_registry import SearchSessionRegistry


def _summary(product_id: int, name: str) -> ProductSummary:
    return ProductSummary(id=product_id, name=name, price=20.0, category="Shorts")


class PendingLookups:
    """Search handler whose responses are released by the test."""

    def __init__(self) -> None:
        self.futures: dict[str, asyncio.Future[list[ProductSummary]]] = {}

    async def __call__(self, text: str) -> list[ProductSummary]:
        future = asyncio.get_running_loop().create_future()
        self.futures[text] = future
        return await future

    async def wait_for_lookup(self, text: str) -> asyncio.Future[list[ProductSummary]]:
        for _ in range(100):
            if text in self.futures:
                return self.futures[text]
            await asyncio.sleep(0)
        raise AssertionError(f"lookup for {text!r} never started")


@pytest.fixture()
def controller(gateway, scheduler):
    search = IncrementalSearchController(gateway, scheduler)
    yield search
    search.close()


@pytest.mark.asyncio
async def test_burst_of_keystrokes_triggers_single_lookup(gateway, scheduler, controller):
    keystrokes = [("l", 50), ("le", 50), ("leg", 40), ("legg", 0)]
    for text, gap in keystrokes:
        controller.on_input(text)
        assert controller.status is SearchStatus.DEBOUNCING
        scheduler.advance(gap)

    # Last keystroke landed at 140ms; the lookup fires 300ms later.
    assert scheduler.now_ms == 140
    scheduler.advance(299)
    assert gateway.search_calls == []

    scheduler.advance(1)
    await controller.wait_settled()

    assert scheduler.now_ms == 440
    assert gateway.search_calls == ["legg"]


@pytest.mark.asyncio
async def test_results_replace_previous_results(gateway, scheduler, controller, product_factory):
    gateway.products = [
        product_factory(1, name="Compression Leggings"),
        product_factory(2, name="Athletic Shorts"),
    ]

    controller.on_input("leg")
    scheduler.advance(300)
    assert controller.status is SearchStatus.SEARCHING
    await controller.wait_settled()

    assert [r.name for r in controller.results] == ["Compression Leggings"]
    assert controller.status is SearchStatus.IDLE

    controller.on_input("short")
    scheduler.advance(300)
    await controller.wait_settled()

    assert [r.name for r in controller.results] == ["Athletic Shorts"]


@pytest.mark.asyncio
async def test_stale_response_never_overwrites_newer_one(gateway, scheduler, controller):
    lookups = PendingLookups()
    gateway.search_handler = lookups

    controller.on_input("sh")
    scheduler.advance(300)
    first = await lookups.wait_for_lookup("sh")
    assert controller.generation == 1

    controller.on_input("shorts")
    scheduler.advance(300)
    second = await lookups.wait_for_lookup("shorts")
    assert controller.generation == 2

    second.set_result([_summary(2, "Athletic Shorts")])
    await asyncio.sleep(0)
    first.set_result([_summary(1, "Shoe Bag"), _summary(3, "Shirt")])
    await controller.wait_settled()

    assert [r.id for r in controller.results] == [2]
    assert controller.snapshot().generation == 2
    assert controller.status is SearchStatus.IDLE


@pytest.mark.asyncio
async def test_stale_failure_is_ignored(gateway, scheduler, controller):
    lookups = PendingLookups()
    gateway.search_handler = lookups

    controller.on_input("a")
    scheduler.advance(300)
    first = await lookups.wait_for_lookup("a")
    controller.on_input("ab")
    scheduler.advance(300)
    second = await lookups.wait_for_lookup("ab")

    second.set_result([_summary(5, "Abstract Tee")])
    await asyncio.sleep(0)
    first.set_exception(RuntimeError("boom"))
    await controller.wait_settled()

    assert controller.status is SearchStatus.IDLE
    assert [r.id for r in controller.results] == [5]


@pytest.mark.asyncio
async def test_blank_query_clears_results_without_lookup(gateway, scheduler, controller, product_factory):
    gateway.products = [product_factory(1, name="Track Pants")]
    controller.on_input("track")
    scheduler.advance(300)
    await controller.wait_settled()
    assert len(controller.results) == 1

    controller.on_input("   ")
    scheduler.advance(300)
    await controller.wait_settled()

    assert gateway.search_calls == ["track"]
    assert controller.results == []
    assert controller.status is SearchStatus.IDLE


@pytest.mark.asyncio
async def test_failed_lookup_shows_empty_results_with_error(gateway, scheduler, controller):
    async def failing(text):
        raise RuntimeError("backend down")

    gateway.search_handler = failing
    controller.on_input("joggers")
    scheduler.advance(300)
    await controller.wait_settled()

    snapshot = controller.snapshot()
    assert snapshot.status is SearchStatus.ERROR
    assert snapshot.results == []
    assert snapshot.loading is False


@pytest.mark.asyncio
async def test_timed_out_lookup_counts_as_failure(gateway, scheduler):
    lookups = PendingLookups()
    gateway.search_handler = lookups
    controller = IncrementalSearchController(gateway, scheduler, timeout_seconds=0.01)

    controller.on_input("slow")
    scheduler.advance(300)
    await controller.wait_settled()

    assert controller.status is SearchStatus.ERROR
    assert controller.results == []
    controller.close()


@pytest.mark.asyncio
async def test_clear_ignores_in_flight_lookup(gateway, scheduler, controller):
    lookups = PendingLookups()
    gateway.search_handler = lookups

    controller.on_input("tights")
    scheduler.advance(300)
    pending = await lookups.wait_for_lookup("tights")

    controller.clear()
    pending.set_result([_summary(4, "Running Tights")])
    await controller.wait_settled()

    assert controller.query == ""
    assert controller.results == []
    assert controller.status is SearchStatus.IDLE


@pytest.mark.asyncio
async def test_clear_cancels_pending_debounce(gateway, scheduler, controller):
    controller.on_input("shorts")
    controller.clear()
    scheduler.advance(1000)
    await controller.wait_settled()

    assert gateway.search_calls == []
    assert scheduler.pending == 0


@pytest.mark.asyncio
async def test_closed_controller_rejects_input(gateway, scheduler):
    lookups = PendingLookups()
    gateway.search_handler = lookups
    controller = IncrementalSearchController(gateway, scheduler)

    controller.on_input("pants")
    scheduler.advance(300)
    await lookups.wait_for_lookup("pants")
    controller.close()
    await controller.wait_settled()

    assert controller.closed
    assert controller.results == []
    with pytest.raises(SearchSessionClosed):
        controller.on_input("more")


@pytest.mark.asyncio
async def test_registry_evicts_least_recent_session(gateway, scheduler):
    registry = SearchSessionRegistry(max_sessions=2)
    first_id, first = registry.create(gateway, scheduler)
    second_id, _ = registry.create(gateway, scheduler)

    assert registry.get(first_id) is first
    third_id, _ = registry.create(gateway, scheduler)

    assert len(registry) == 2
    assert registry.get(second_id) is None
    assert registry.get(first_id) is first
    assert registry.close(third_id) is True
    assert registry.close(third_id) is False
    registry.close_all()
    assert first.closed


@pytest.mark.asyncio
async def test_backend_error_surfaces_as_error_state(gateway, scheduler, controller):
    async def outage(text):
        raise GatewayError("Backend request to products failed", status_code=503)

    gateway.search_handler = outage
    controller.on_input("shorts")
    scheduler.advance(300)
    await controller.wait_settled()

    assert controller.status is SearchStatus.ERROR
    assert controller.results == []


@pytest.mark.asyncio
async def test_lookup_latency_is_measured_on_scheduler_clock(
    gateway, scheduler, controller, caplog
):
    caplog.set_level(logging.DEBUG, logger="storefront.services.search.controller")
    lookups = PendingLookups()
    gateway.search_handler = lookups

    controller.on_input("joggers")
    scheduler.advance(300)
    pending = await lookups.wait_for_lookup("joggers")
    scheduler.advance(120)
    pending.set_result([_summary(3, "Premium Joggers")])
    await controller.wait_settled()

    completed = [r for r in caplog.records if r.getMessage() == "Search completed"]
    assert len(completed) == 1
    assert completed[0].elapsed_ms == 120
    assert completed[0].results == 1
