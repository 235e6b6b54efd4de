"""Checkout error taxonomy.

Every error is terminal for the current request. The API layer turns them
into JSON responses using ``status_code``.
"""

from fastapi import status


class CheckoutError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    @property
    def code(self) -> str:
        return type(self).__name__


class EmptyCart(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Cart cannot be empty")


class InvalidLine(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Each cart item must include an ISBN")


class InvalidQuantity(CheckoutError):
    def __init__(self) -> None:
        super().__init__("Quantity must be at least 1")


class ItemsNotFound(CheckoutError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, isbns: list[str]) -> None:
        self.isbns = sorted(isbns)
        super().__init__("Book not found: " + ", ".join(self.isbns))


class InsufficientStock(CheckoutError):
    def __init__(self, isbn: str, title: str, remaining: int) -> None:
        self.isbn = isbn
        self.remaining = remaining
        super().__init__(f'Only {remaining} copies of "{title}" remain.')


class CheckoutFailed(CheckoutError):
    """Storage failed while committing; nothing was applied."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self) -> None:
        super().__init__("Checkout could not be completed, no changes were made")
