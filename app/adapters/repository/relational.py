"""Relational repository adapters backed by an async SQLAlchemy session."""

import logging
from collections.abc import Iterable
from dataclasses import replace

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.entities import CatalogItem, OrderLine, OrderRecord
from app.domain.models import Book, Order
from app.domain.models import OrderLine as OrderLineRow
from app.ports.catalog import CatalogPort
from app.ports.orders import OrderStorePort
from app.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _to_item(book: Book) -> CatalogItem:
    return CatalogItem(
        isbn=book.isbn,
        title=book.title,
        price=book.price,
        inventory=book.inventory,
        author=book.author,
        image_url=book.image_url,
    )


def _to_record(order: Order) -> OrderRecord:
    return OrderRecord(
        id=order.id,
        user_id=order.user_id,
        created_at=order.created_at,
        lines=tuple(
            OrderLine(
                isbn=line.isbn,
                title=line.title,
                price=line.price,
                quantity=line.quantity,
                image_url=line.image_url,
            )
            for line in order.lines
        ),
    )


class SqlAlchemyCatalogAdapter(CatalogPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_catalog_items(self, isbns: Iterable[str], lock: bool = False) -> list[CatalogItem]:
        keys = sorted(set(isbns))
        if not keys:
            return []
        # ISBN order doubles as the lock order, so two carts never deadlock
        stmt = (
            select(Book)
            .where(Book.isbn.in_(keys))
            .order_by(Book.isbn)
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return [_to_item(book) for book in result.scalars().all()]

    async def save_catalog_items(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        books: list[Book] = []
        for item in items:
            book = await self._session.get(Book, item.isbn)
            if book is None:
                book = Book(isbn=item.isbn)
                self._session.add(book)
            book.title = item.title
            book.author = item.author
            book.price = item.price
            book.inventory = item.inventory
            book.image_url = item.image_url
            books.append(book)
        await self._session.flush()
        return [_to_item(book) for book in books]

    async def decrement_stock(self, isbn: str, quantity: int) -> CatalogItem | None:
        result = await self._session.execute(
            update(Book)
            .where(Book.isbn == isbn, Book.inventory >= quantity)
            .values(inventory=Book.inventory - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.debug("Guarded decrement missed: isbn=%s quantity=%d", isbn, quantity)
            return None
        book = await self._session.get(Book, isbn, populate_existing=True)
        return _to_item(book)

    async def list_catalog_items(self) -> list[CatalogItem]:
        result = await self._session.execute(select(Book).order_by(Book.isbn))
        return [_to_item(book) for book in result.scalars().all()]


class SqlAlchemyOrderStore(OrderStorePort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_order(self, record: OrderRecord) -> OrderRecord:
        order = Order(
            user_id=record.user_id,
            created_at=record.created_at,
            lines=[
                OrderLineRow(
                    position=position,
                    isbn=line.isbn,
                    title=line.title,
                    price=line.price,
                    quantity=line.quantity,
                    image_url=line.image_url,
                )
                for position, line in enumerate(record.lines)
            ],
        )
        self._session.add(order)
        await self._session.flush()
        return replace(record, id=order.id)

    async def list_orders(self) -> list[OrderRecord]:
        result = await self._session.execute(select(Order).order_by(Order.created_at, Order.id))
        return [_to_record(order) for order in result.scalars().all()]

    async def list_orders_for_user(self, user_id: str) -> list[OrderRecord]:
        result = await self._session.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return [_to_record(order) for order in result.scalars().all()]


class SqlAlchemyUnitOfWork(UnitOfWork):
    """One session, one transaction. Commit makes every staged write visible."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._session = self._session_factory()
        self.catalog = SqlAlchemyCatalogAdapter(self._session)
        self.orders = SqlAlchemyOrderStore(self._session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.rollback()
        finally:
            await self._session.close()
            self._session = None

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
