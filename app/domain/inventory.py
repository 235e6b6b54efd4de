"""Stock validation for an aggregated cart. Pure, never mutates."""

from collections.abc import Iterable, Mapping

from app.domain.entities import CatalogItem, StockAllocation
from app.domain.errors import InsufficientStock, ItemsNotFound


def validate_inventory(
    cart: Mapping[str, int],
    items: Iterable[CatalogItem],
) -> list[StockAllocation]:
    """
    Match each requested ISBN to its catalog item and check stock.

    Raises ItemsNotFound with the full missing set, then InsufficientStock
    for the first short item in catalog order.
    """
    found = [item for item in items if item.isbn in cart]

    missing = set(cart) - {item.isbn for item in found}
    if missing:
        raise ItemsNotFound(list(missing))

    allocations: list[StockAllocation] = []
    for item in found:
        requested = cart[item.isbn]
        if requested > item.inventory:
            raise InsufficientStock(item.isbn, item.title, item.inventory)
        allocations.append(StockAllocation(item=item, quantity=requested))
    return allocations
