"""Order history routes."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user_id, get_unit_of_work
from app.api.schemas import OrderResponse
from app.ports.unit_of_work import UnitOfWork

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    uow: UnitOfWork = Depends(get_unit_of_work),
    user_id: str = Depends(get_current_user_id),
) -> list[OrderResponse]:
    """The caller's orders, newest first."""
    async with uow:
        records = await uow.orders.list_orders_for_user(user_id)
    return [OrderResponse.from_record(record) for record in records]
