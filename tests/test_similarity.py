from itertools import permutations

import pytest

from app.domain.similarity import (
    OrderPair,
    compute_similarities,
    intersection_items,
    jaccard,
)

SETS = [
    frozenset({"A", "B", "C"}),
    frozenset({"B", "C", "D"}),
    frozenset({"E"}),
    frozenset({"A"}),
    frozenset(),
]


def test_identical_orders_score_one():
    assert jaccard(frozenset({"A", "B"}), frozenset({"B", "A"})) == 1.0


def test_disjoint_orders_score_zero_and_are_dropped():
    histories = [frozenset({"A", "B"}), frozenset({"C"})]
    assert jaccard(*histories) == 0.0
    assert compute_similarities(histories) == []


def test_empty_orders_score_zero():
    assert jaccard(frozenset(), frozenset()) == 0.0


def test_symmetric_and_bounded():
    for a, b in permutations(SETS, 2):
        score = jaccard(a, b)
        assert score == jaccard(b, a)
        assert 0.0 <= score <= 1.0


def test_single_shared_item():
    first = frozenset({"X", "a1", "a2"})
    second = frozenset({"X", "b1"})
    [similarity] = compute_similarities([first, second])

    assert similarity.pair == OrderPair(0, 1)
    assert similarity.score == pytest.approx(1 / (len(first) + len(second) - 1))
    assert intersection_items([first, second], similarity.pair) == {"X"}


def test_pairs_use_canonical_order():
    pairs = compute_similarities(SETS)
    assert {p.pair for p in pairs} == {OrderPair(0, 1), OrderPair(0, 3)}
    assert all(p.pair.first < p.pair.second for p in pairs)
    assert all(0 < p.score <= 1 for p in pairs)


def test_order_pair_of_normalizes():
    assert OrderPair.of(5, 2) == OrderPair(2, 5)
    assert OrderPair.of(2, 5) == OrderPair(2, 5)
    with pytest.raises(ValueError):
        OrderPair.of(3, 3)
