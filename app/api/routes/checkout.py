"""Checkout routes."""

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_current_user_id, get_unit_of_work
from app.api.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ErrorResponse,
    OrderResponse,
    StockLevelResponse,
)
from app.config import settings
from app.ports.unit_of_work import UnitOfWork
from app.services.checkout import CheckoutService

router = APIRouter(prefix="/api/cart", tags=["Checkout"])


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def checkout(
    data: CheckoutRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    user_id: str = Depends(get_current_user_id),
) -> CheckoutResponse:
    """Buy every book in the cart or none of them."""
    service = CheckoutService(uow, strategy=settings.stock_lock_strategy)
    result = await service.checkout(user_id, data.to_cart_lines())
    return CheckoutResponse(
        order=OrderResponse.from_record(result.order),
        updated_books=[StockLevelResponse.model_validate(item) for item in result.updated_items],
    )
