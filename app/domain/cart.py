"""Cart aggregation: collapse duplicate lines into one quantity per ISBN."""

from collections.abc import Sequence

from app.domain.entities import CartLine
from app.domain.errors import EmptyCart, InvalidLine, InvalidQuantity


def aggregate_cart(lines: Sequence[CartLine | None] | None) -> dict[str, int]:
    """
    Sum requested quantities per ISBN.

    The returned dict keeps first-occurrence order. Lines are checked in
    order, so the first bad line decides which error is raised.
    """
    if not lines:
        raise EmptyCart()

    aggregated: dict[str, int] = {}
    for line in lines:
        if line is None or line.isbn is None or not line.isbn.strip():
            raise InvalidLine()
        if line.quantity is None or line.quantity <= 0:
            raise InvalidQuantity()
        aggregated[line.isbn] = aggregated.get(line.isbn, 0) + line.quantity
    return aggregated
