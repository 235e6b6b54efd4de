"""
Pairwise Jaccard similarity over historical orders.

Every unordered pair of orders is compared, so the cost is O(n²) pairs times
O(k) set work per pair (k = items per order). That is fine for a bookstore's
order history but not for large histories on the request path; those need
the pairs precomputed and cached.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import NamedTuple


class OrderPair(NamedTuple):
    """Indices of two orders in the history, always with first < second."""

    first: int
    second: int

    @classmethod
    def of(cls, a: int, b: int) -> "OrderPair":
        if a == b:
            raise ValueError("an order is not paired with itself")
        return cls(a, b) if a < b else cls(b, a)


@dataclass(frozen=True)
class SimilarityPair:
    pair: OrderPair
    score: float


def jaccard(a: frozenset[str], b: frozenset[str]) -> float:
    """|a ∩ b| / |a ∪ b|, or 0.0 when both sets are empty."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


def compute_similarities(histories: Sequence[frozenset[str]]) -> list[SimilarityPair]:
    """Score every pair of orders, dropping pairs that share no items."""
    pairs: list[SimilarityPair] = []
    for i, j in combinations(range(len(histories)), 2):
        score = jaccard(histories[i], histories[j])
        if score > 0:
            pairs.append(SimilarityPair(pair=OrderPair.of(i, j), score=score))
    return pairs


def intersection_items(histories: Sequence[frozenset[str]], pair: OrderPair) -> frozenset[str]:
    """Items bought in both orders of ``pair``."""
    return histories[pair.first] & histories[pair.second]
