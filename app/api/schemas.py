"""Request and response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import CartLine, CatalogItem, OrderRecord


# ── Checkout ───────────────────────────────────────


class CheckoutItemRequest(BaseModel):
    # Left unconstrained: bad lines are reported by the cart rules, not as 422s
    isbn: str | None = None
    quantity: int | None = None

    def to_cart_line(self) -> CartLine:
        return CartLine(isbn=self.isbn, quantity=self.quantity)


class CheckoutRequest(BaseModel):
    items: list[CheckoutItemRequest | None] | None = None

    def to_cart_lines(self) -> list[CartLine | None] | None:
        if self.items is None:
            return None
        return [item.to_cart_line() if item is not None else None for item in self.items]


class OrderLineResponse(BaseModel):
    isbn: str
    title: str
    price: float
    quantity: int
    image_url: str | None = None


class OrderResponse(BaseModel):
    id: int
    created_at: datetime
    items: list[OrderLineResponse]

    @classmethod
    def from_record(cls, record: OrderRecord) -> "OrderResponse":
        return cls(
            id=record.id,
            created_at=record.created_at,
            items=[
                OrderLineResponse(
                    isbn=line.isbn,
                    title=line.title,
                    price=float(line.price),
                    quantity=line.quantity,
                    image_url=line.image_url,
                )
                for line in record.lines
            ],
        )


class StockLevelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    isbn: str
    title: str
    inventory: int


class CheckoutResponse(BaseModel):
    order: OrderResponse
    updated_books: list[StockLevelResponse]


class ErrorResponse(BaseModel):
    detail: str
    code: str


# ── Recommendations ────────────────────────────────


class RecommendationItem(BaseModel):
    isbn: str
    title: str
    author: str
    price: float
    inventory: int
    image_url: str | None = None
    score: float = Field(ge=0, le=1)
    reason: str

    @classmethod
    def from_item(cls, item: CatalogItem, score: float, reason: str) -> "RecommendationItem":
        return cls(
            isbn=item.isbn,
            title=item.title,
            author=item.author,
            price=float(item.price),
            inventory=item.inventory,
            image_url=item.image_url,
            score=score,
            reason=reason,
        )


class RecommendationsResponse(BaseModel):
    recommendations: list[RecommendationItem]
    count: int
