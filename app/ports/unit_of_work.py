"""Unit of work port: one atomic boundary over catalog and order storage."""

from abc import ABC, abstractmethod
from types import TracebackType

from app.ports.catalog import CatalogPort
from app.ports.orders import OrderStorePort


class UnitOfWork(ABC):
    """
    Async context manager grouping catalog and order writes.

    Nothing written through ``catalog`` or ``orders`` becomes visible until
    ``commit()``. Leaving the block without committing rolls everything back.
    """

    catalog: CatalogPort
    orders: OrderStorePort

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """Discard uncommitted work. A no-op after a successful commit."""
        ...
