"""Recommender port — abstract interface for the recommendation engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.domain.entities import CatalogItem

REASON_CO_PURCHASED = "co-purchased"
REASON_PREVIOUSLY_PURCHASED = "previously purchased"
REASON_CATALOG = "catalog pick"


@dataclass(frozen=True)
class RecommendationResult:
    """A single recommendation with score and explanation."""

    item: CatalogItem
    score: float
    reason: str


class RecommenderPort(ABC):
    """Abstraction for the book recommendation engine."""

    @abstractmethod
    async def recommend(self, limit: int = 8) -> list[RecommendationResult]:
        """Return up to ``limit`` distinct ranked book recommendations."""
        ...
