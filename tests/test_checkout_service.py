"""Checkout service against the in-memory store, under both lock strategies."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from app.adapters.repository.memory import InMemoryStore, InMemoryUnitOfWork
from app.config import StockLockStrategy
from app.domain.entities import CartLine
from app.domain.errors import (
    CheckoutFailed,
    EmptyCart,
    InsufficientStock,
    InvalidQuantity,
    ItemsNotFound,
)
from app.services.checkout import CheckoutService
from tests.conftest import make_item

STRATEGIES = [StockLockStrategy.PESSIMISTIC, StockLockStrategy.OPTIMISTIC]


def snapshot(store: InMemoryStore):
    return dict(store.books), list(store.orders)


class YieldingUnitOfWork(InMemoryUnitOfWork):
    """Gives other checkouts a chance to run right before committing."""

    async def commit(self) -> None:
        await asyncio.sleep(0)
        await super().commit()


class BrokenCommitUnitOfWork(InMemoryUnitOfWork):
    async def commit(self) -> None:
        raise ConnectionError("database went away")


@pytest.fixture(params=STRATEGIES, ids=lambda s: s.value)
def strategy(request) -> StockLockStrategy:
    return request.param


def service_for(store: InMemoryStore, strategy: StockLockStrategy, uow_class=InMemoryUnitOfWork):
    return CheckoutService(uow_class(store), strategy=strategy)


# ── Success ────────────────────────────────────────


@pytest.mark.asyncio
async def test_checkout_decrements_stock_and_records_order(store, strategy):
    result = await service_for(store, strategy).checkout(
        "alice", [CartLine("A", 5), CartLine("B", 1)]
    )

    assert store.books["A"].inventory == 0
    assert store.books["B"].inventory == 2
    assert {i.isbn: i.inventory for i in result.updated_items} == {"A": 0, "B": 2}

    order = result.order
    assert order.id == 1
    assert order.user_id == "alice"
    assert [(l.isbn, l.title, l.quantity) for l in order.lines] == [
        ("A", "Alpha", 5),
        ("B", "Beta", 1),
    ]
    assert store.orders == [order]


@pytest.mark.asyncio
async def test_duplicate_lines_match_single_line(strategy):
    split = InMemoryStore([make_item("A", "Alpha", 5)])
    merged = InMemoryStore([make_item("A", "Alpha", 5)])

    first = await service_for(split, strategy).checkout("u", [CartLine("A", 2), CartLine("A", 3)])
    second = await service_for(merged, strategy).checkout("u", [CartLine("A", 5)])

    assert split.books == merged.books
    assert [(l.isbn, l.quantity) for l in first.order.lines] == [
        (l.isbn, l.quantity) for l in second.order.lines
    ]


@pytest.mark.asyncio
async def test_decrements_sum_to_requested_quantities(store, strategy):
    before = {isbn: item.inventory for isbn, item in store.books.items()}
    lines = [CartLine("B", 1), CartLine("A", 2), CartLine("B", 2), CartLine("A", 1)]

    await service_for(store, strategy).checkout("u", lines)

    taken = sum(before[isbn] - item.inventory for isbn, item in store.books.items())
    assert taken == sum(line.quantity for line in lines)
    assert all(item.inventory >= 0 for item in store.books.values())


@pytest.mark.asyncio
async def test_order_keeps_price_paid(store, strategy):
    result = await service_for(store, strategy).checkout("u", [CartLine("A", 1)])
    store.books["A"] = replace(store.books["A"], price=Decimal("99.99"), title="Renamed")

    assert result.order.lines[0].price == Decimal("10.00")
    assert store.orders[0].lines[0].title == "Alpha"


# ── Rejections ─────────────────────────────────────


@pytest.mark.asyncio
async def test_insufficient_stock_changes_nothing(store, strategy):
    before = snapshot(store)

    with pytest.raises(InsufficientStock) as exc_info:
        await service_for(store, strategy).checkout("u", [CartLine("A", 6)])

    assert "5" in exc_info.value.detail
    assert "Alpha" in exc_info.value.detail
    assert snapshot(store) == before
    assert store.books["A"].inventory == 5


@pytest.mark.asyncio
async def test_unknown_isbns_change_nothing(store, strategy):
    before = snapshot(store)

    with pytest.raises(ItemsNotFound) as exc_info:
        await service_for(store, strategy).checkout(
            "u", [CartLine("ZZZ", 1), CartLine("A", 1), CartLine("999", 1)]
        )

    assert exc_info.value.detail == "Book not found: 999, ZZZ"
    assert snapshot(store) == before


@pytest.mark.asyncio
async def test_unknown_isbns_take_no_locks(store):
    with pytest.raises(ItemsNotFound):
        await service_for(store, StockLockStrategy.PESSIMISTIC).checkout(
            "u", [CartLine("ZZZ", 1), CartLine("A", 1)]
        )

    assert "ZZZ" not in store._locks
    assert not store.lock_for("A").locked()


@pytest.mark.asyncio
async def test_stale_read_reports_current_stock(store):
    store.books["A"] = replace(store.books["A"], inventory=1)
    before = snapshot(store)
    uow = InMemoryUnitOfWork(store)
    read = uow.catalog.get_catalog_items
    calls = []

    async def stale_first_read(isbns, lock=False):
        items = await read(isbns, lock)
        calls.append(list(items))
        if len(calls) == 1:
            return [replace(item, inventory=5) for item in items]
        return items

    uow.catalog.get_catalog_items = stale_first_read

    with pytest.raises(InsufficientStock) as exc_info:
        await CheckoutService(uow, strategy=StockLockStrategy.OPTIMISTIC).checkout(
            "u", [CartLine("A", 3)]
        )

    assert exc_info.value.remaining == 1
    assert exc_info.value.detail == 'Only 1 copies of "Alpha" remain.'
    assert len(calls) == 2
    assert snapshot(store) == before
    assert store.orders == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "lines, error",
    [([], EmptyCart), (None, EmptyCart), ([CartLine("A", 0)], InvalidQuantity)],
)
async def test_bad_carts_rejected(store, lines, error):
    before = snapshot(store)
    with pytest.raises(error):
        await service_for(store, StockLockStrategy.PESSIMISTIC).checkout("u", lines)
    assert snapshot(store) == before


# ── Atomicity ──────────────────────────────────────


@pytest.mark.asyncio
async def test_failure_before_commit_leaves_store_untouched(store, strategy):
    before = snapshot(store)
    uow = InMemoryUnitOfWork(store)

    async def explode(record):
        raise RuntimeError("injected")

    uow.orders.save_order = explode

    with pytest.raises(CheckoutFailed) as exc_info:
        await CheckoutService(uow, strategy=strategy).checkout("u", [CartLine("A", 2), CartLine("B", 1)])

    assert exc_info.value.status_code == 500
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert snapshot(store) == before
    assert not uow.staged_items and not uow.decrements


@pytest.mark.asyncio
async def test_commit_failure_is_single_terminal_error(store, strategy):
    before = snapshot(store)

    with pytest.raises(CheckoutFailed):
        await service_for(store, strategy, BrokenCommitUnitOfWork).checkout("u", [CartLine("A", 1)])

    assert snapshot(store) == before


# ── Concurrency ────────────────────────────────────


@pytest.mark.asyncio
async def test_concurrent_checkouts_never_oversell(store, strategy):
    services = [service_for(store, strategy, YieldingUnitOfWork) for _ in range(2)]

    results = await asyncio.gather(
        *(s.checkout(f"user{n}", [CartLine("A", 3)]) for n, s in enumerate(services)),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)
    assert failures[0].remaining == 2
    assert store.books["A"].inventory == 2
    assert len(store.orders) == 1


@pytest.mark.asyncio
async def test_concurrent_checkouts_on_different_books_both_succeed(store, strategy):
    results = await asyncio.gather(
        service_for(store, strategy, YieldingUnitOfWork).checkout("u1", [CartLine("A", 5)]),
        service_for(store, strategy, YieldingUnitOfWork).checkout("u2", [CartLine("B", 3)]),
    )

    assert [r.order.user_id for r in results] == ["u1", "u2"]
    assert store.books["A"].inventory == 0
    assert store.books["B"].inventory == 0
