"""Order store port: persist and read order records."""

from abc import ABC, abstractmethod

from app.domain.entities import OrderRecord


class OrderStorePort(ABC):
    @abstractmethod
    async def save_order(self, record: OrderRecord) -> OrderRecord:
        """Store the complete order with all its lines; returns it with an id."""
        ...

    @abstractmethod
    async def list_orders(self) -> list[OrderRecord]:
        """All orders, oldest first."""
        ...

    @abstractmethod
    async def list_orders_for_user(self, user_id: str) -> list[OrderRecord]:
        """One user's orders, newest first."""
        ...
