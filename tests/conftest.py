from collections.abc import AsyncGenerator, Iterable
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.adapters.repository.memory import InMemoryStore
from app.domain.entities import CatalogItem
from app.domain.models import Base, Book

# In-memory SQLite shared across sessions (override in CI with a real PG URL)
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def make_item(
    isbn: str,
    title: str | None = None,
    inventory: int = 10,
    price: str = "10.00",
) -> CatalogItem:
    return CatalogItem(
        isbn=isbn,
        title=title or f"Book {isbn}",
        price=Decimal(price),
        inventory=inventory,
        author="Some Author",
        image_url=f"http://example.com/{isbn}.jpg",
    )


async def seed_books(
    factory: async_sessionmaker[AsyncSession], items: Iterable[CatalogItem]
) -> None:
    async with factory() as session:
        session.add_all(
            Book(
                isbn=item.isbn,
                title=item.title,
                author=item.author,
                price=item.price,
                inventory=item.inventory,
                image_url=item.image_url,
            )
            for item in items
        )
        await session.commit()


@pytest.fixture
def store() -> InMemoryStore:
    """Alpha has 5 copies, Beta has 3."""
    return InMemoryStore([make_item("A", "Alpha", 5), make_item("B", "Beta", 3)])


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh schema per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
