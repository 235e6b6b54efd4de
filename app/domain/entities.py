"""Plain value objects shared by the checkout and recommendation engines.

These are decoupled from the ORM so the core logic can run against any
repository adapter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class CatalogItem:
    """A book as seen by the core: price, title and available stock."""

    isbn: str
    title: str
    price: Decimal
    inventory: int
    author: str = ""
    image_url: str | None = None


@dataclass(frozen=True)
class CartLine:
    isbn: str | None
    quantity: int | None


@dataclass(frozen=True)
class StockAllocation:
    """A validated catalog item paired with the quantity being bought."""

    item: CatalogItem
    quantity: int

    @property
    def remaining(self) -> int:
        return self.item.inventory - self.quantity


@dataclass(frozen=True)
class OrderLine:
    isbn: str
    title: str
    price: Decimal
    quantity: int
    image_url: str | None = None

    @classmethod
    def snapshot(cls, allocation: StockAllocation) -> "OrderLine":
        """Freeze the current catalog values for one purchased item."""
        item = allocation.item
        return cls(
            isbn=item.isbn,
            title=item.title,
            price=item.price,
            quantity=allocation.quantity,
            image_url=item.image_url,
        )


@dataclass(frozen=True)
class OrderRecord:
    user_id: str
    created_at: datetime
    lines: tuple[OrderLine, ...] = field(default_factory=tuple)
    id: int | None = None

    @property
    def isbns(self) -> frozenset[str]:
        return frozenset(line.isbn for line in self.lines)


@dataclass(frozen=True)
class CheckoutResult:
    order: OrderRecord
    updated_items: list[CatalogItem]
