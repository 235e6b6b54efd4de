"""Checkout: validate a cart and apply it as one atomic unit of work."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime, timezone

from app.config import StockLockStrategy
from app.domain.cart import aggregate_cart
from app.domain.entities import CartLine, CatalogItem, CheckoutResult, OrderLine, OrderRecord, StockAllocation
from app.domain.errors import CheckoutError, CheckoutFailed, InsufficientStock
from app.domain.inventory import validate_inventory
from app.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutService:
    """
    Turns a cart into an order and a set of stock decrements.

    Either both the order and every decrement are committed, or nothing is.
    Errors are never retried here; resubmitting is the caller's decision.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        strategy: StockLockStrategy = StockLockStrategy.PESSIMISTIC,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._uow = uow
        self._strategy = strategy
        self._clock = clock

    async def checkout(self, user_id: str, lines: Sequence[CartLine | None] | None) -> CheckoutResult:
        """
        Steps:
        1. Aggregate duplicate lines and validate against current stock
           (rows locked under the pessimistic strategy).
        2. Stage the decrements.
        3. Build the complete order with price snapshots.
        4. Persist order and stock together and commit.
        """
        cart = aggregate_cart(lines)
        pessimistic = self._strategy is StockLockStrategy.PESSIMISTIC

        async with self._uow as uow:
            items = await uow.catalog.get_catalog_items(cart.keys(), lock=pessimistic)
            allocations = validate_inventory(cart, items)

            order = OrderRecord(
                user_id=user_id,
                created_at=self._clock(),
                lines=tuple(OrderLine.snapshot(a) for a in allocations),
            )

            try:
                if pessimistic:
                    updated = await uow.catalog.save_catalog_items(
                        _decremented(a) for a in allocations
                    )
                else:
                    updated = await self._guarded_decrements(uow, allocations)
                saved = await uow.orders.save_order(order)
                await uow.commit()
            except CheckoutError:
                raise
            except Exception as exc:
                logger.exception("Checkout commit failed for user=%s", user_id)
                raise CheckoutFailed() from exc

        logger.info(
            "Order %s committed: user=%s lines=%d copies=%d",
            saved.id,
            user_id,
            len(saved.lines),
            sum(line.quantity for line in saved.lines),
        )
        return CheckoutResult(order=saved, updated_items=updated)

    async def _guarded_decrements(
        self, uow: UnitOfWork, allocations: list[StockAllocation]
    ) -> list[CatalogItem]:
        updated: list[CatalogItem] = []
        for allocation in allocations:
            item = await uow.catalog.decrement_stock(allocation.item.isbn, allocation.quantity)
            if item is None:
                # stock moved since validation; report what is left now
                current = await uow.catalog.get_catalog_items([allocation.item.isbn])
                remaining = current[0].inventory if current else 0
                logger.warning(
                    "Stock changed during checkout: isbn=%s requested=%d remaining=%d",
                    allocation.item.isbn,
                    allocation.quantity,
                    remaining,
                )
                raise InsufficientStock(allocation.item.isbn, allocation.item.title, remaining)
            updated.append(item)
        return updated


def _decremented(allocation: StockAllocation) -> CatalogItem:
    return replace(allocation.item, inventory=allocation.remaining)
