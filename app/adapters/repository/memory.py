"""In-memory repository adapters: staged writes over a process-local store."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import replace

from app.domain.entities import CatalogItem, OrderRecord
from app.domain.errors import InsufficientStock
from app.ports.catalog import CatalogPort
from app.ports.orders import OrderStorePort
from app.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class InMemoryStore:
    """
    Process-local book and order storage.

    Used by the test suite and by the ``memory`` repository backend for
    local development. Not shared between processes.
    """

    def __init__(self, items: Iterable[CatalogItem] = ()) -> None:
        self.books: dict[str, CatalogItem] = {item.isbn: item for item in items}
        self.orders: list[OrderRecord] = []
        self._locks: dict[str, asyncio.Lock] = {}
        self._next_order_id = 1

    def lock_for(self, isbn: str) -> asyncio.Lock:
        return self._locks.setdefault(isbn, asyncio.Lock())

    def next_order_id(self) -> int:
        order_id = self._next_order_id
        self._next_order_id += 1
        return order_id


class InMemoryUnitOfWork(UnitOfWork):
    """
    Stages writes until commit.

    Row locks are per-ISBN ``asyncio.Lock`` objects taken in ISBN order and
    released on commit or rollback. Guarded decrements are checked again
    against committed stock at commit time.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.catalog = _InMemoryCatalog(self)
        self.orders = _InMemoryOrders(self)
        self.staged_items: dict[str, CatalogItem] = {}
        self.decrements: dict[str, int] = {}
        self.staged_orders: list[OrderRecord] = []
        self._held: dict[str, asyncio.Lock] = {}

    async def acquire(self, isbns: Iterable[str]) -> None:
        for isbn in sorted(set(isbns)):
            # unknown ISBNs have no row to lock
            if isbn in self._held or isbn not in self.store.books:
                continue
            lock = self.store.lock_for(isbn)
            await lock.acquire()
            self._held[isbn] = lock

    def view(self, isbn: str) -> CatalogItem | None:
        item = self.staged_items.get(isbn, self.store.books.get(isbn))
        if item is None:
            return None
        taken = self.decrements.get(isbn, 0)
        return replace(item, inventory=item.inventory - taken) if taken else item

    async def commit(self) -> None:
        # no awaits below: the whole commit is atomic on the event loop
        for isbn, quantity in self.decrements.items():
            current = self.staged_items.get(isbn, self.store.books[isbn])
            if current.inventory < quantity:
                raise InsufficientStock(isbn, current.title, current.inventory)

        for isbn, item in self.staged_items.items():
            self.store.books[isbn] = item
        for isbn, quantity in self.decrements.items():
            item = self.store.books[isbn]
            self.store.books[isbn] = replace(item, inventory=item.inventory - quantity)
        self.store.orders.extend(self.staged_orders)
        logger.debug(
            "Committed %d items, %d decrements, %d orders",
            len(self.staged_items),
            len(self.decrements),
            len(self.staged_orders),
        )
        self._clear()

    async def rollback(self) -> None:
        self._clear()

    def _clear(self) -> None:
        self.staged_items.clear()
        self.decrements.clear()
        self.staged_orders.clear()
        for lock in self._held.values():
            lock.release()
        self._held.clear()


class _InMemoryCatalog(CatalogPort):
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    async def get_catalog_items(self, isbns: Iterable[str], lock: bool = False) -> list[CatalogItem]:
        keys = sorted(set(isbns))
        if lock:
            await self._uow.acquire(keys)
        items = (self._uow.view(isbn) for isbn in keys)
        return [item for item in items if item is not None]

    async def save_catalog_items(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        saved = []
        for item in items:
            self._uow.staged_items[item.isbn] = item
            self._uow.decrements.pop(item.isbn, None)
            saved.append(item)
        return saved

    async def decrement_stock(self, isbn: str, quantity: int) -> CatalogItem | None:
        current = self._uow.view(isbn)
        if current is None or current.inventory < quantity:
            return None
        self._uow.decrements[isbn] = self._uow.decrements.get(isbn, 0) + quantity
        return replace(current, inventory=current.inventory - quantity)

    async def list_catalog_items(self) -> list[CatalogItem]:
        isbns = sorted(set(self._uow.store.books) | set(self._uow.staged_items))
        return [self._uow.view(isbn) for isbn in isbns]


class _InMemoryOrders(OrderStorePort):
    def __init__(self, uow: InMemoryUnitOfWork) -> None:
        self._uow = uow

    async def save_order(self, record: OrderRecord) -> OrderRecord:
        saved = replace(record, id=self._uow.store.next_order_id())
        self._uow.staged_orders.append(saved)
        return saved

    async def list_orders(self) -> list[OrderRecord]:
        return self._uow.store.orders + self._uow.staged_orders

    async def list_orders_for_user(self, user_id: str) -> list[OrderRecord]:
        orders = [o for o in await self.list_orders() if o.user_id == user_id]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)
