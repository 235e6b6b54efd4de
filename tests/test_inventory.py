import pytest

from app.domain.errors import InsufficientStock, ItemsNotFound
from app.domain.inventory import validate_inventory
from tests.conftest import make_item


def test_allocations_for_available_stock():
    items = [make_item("A", "Alpha", 5), make_item("B", "Beta", 3)]
    allocations = validate_inventory({"A": 5, "B": 1}, items)

    assert [(a.item.isbn, a.quantity, a.remaining) for a in allocations] == [
        ("A", 5, 0),
        ("B", 1, 2),
    ]
    # validation never touches the catalog values
    assert [i.inventory for i in items] == [5, 3]


def test_all_missing_isbns_reported_sorted():
    with pytest.raises(ItemsNotFound) as exc_info:
        validate_inventory({"Z": 1, "M": 1, "A": 2}, [make_item("M")])

    err = exc_info.value
    assert err.status_code == 404
    assert err.isbns == ["A", "Z"]
    assert err.detail == "Book not found: A, Z"


def test_missing_checked_before_stock():
    with pytest.raises(ItemsNotFound):
        validate_inventory({"A": 99, "X": 1}, [make_item("A", inventory=1)])


def test_first_short_item_in_catalog_order():
    items = [make_item("A", "Alpha", 1), make_item("B", "Beta", 0)]
    with pytest.raises(InsufficientStock) as exc_info:
        validate_inventory({"B": 1, "A": 2}, items)

    err = exc_info.value
    assert err.isbn == "A"
    assert err.remaining == 1
    assert err.detail == 'Only 1 copies of "Alpha" remain.'


def test_exact_stock_is_enough():
    allocations = validate_inventory({"A": 5}, [make_item("A", inventory=5)])
    assert allocations[0].remaining == 0
