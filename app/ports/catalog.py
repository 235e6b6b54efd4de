"""Catalog port: read books and adjust their stock."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.domain.entities import CatalogItem


class CatalogPort(ABC):
    """Abstraction over book storage, as used by checkout and recommendations."""

    @abstractmethod
    async def get_catalog_items(self, isbns: Iterable[str], lock: bool = False) -> list[CatalogItem]:
        """
        Batch lookup ordered by ISBN. Unknown ISBNs are simply absent.

        With ``lock=True`` the rows stay locked against other checkouts until
        the surrounding unit of work ends.
        """
        ...

    @abstractmethod
    async def save_catalog_items(self, items: Iterable[CatalogItem]) -> list[CatalogItem]:
        """Persist title, price and stock of each item as given."""
        ...

    @abstractmethod
    async def decrement_stock(self, isbn: str, quantity: int) -> CatalogItem | None:
        """
        Take ``quantity`` copies only if at least that many remain.

        Returns the updated item, or None when the guard failed.
        """
        ...

    @abstractmethod
    async def list_catalog_items(self) -> list[CatalogItem]:
        ...
