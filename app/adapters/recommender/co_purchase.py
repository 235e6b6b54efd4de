"""Co-purchase recommender: Jaccard similarity over order history."""

import logging
import random
from collections.abc import Callable

from app.domain.recommendation import select_recommendations
from app.ports.recommender import RecommendationResult, RecommenderPort
from app.ports.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CoPurchaseRecommenderAdapter(RecommenderPort):
    """
    Recommends books that similar orders had in common.

    Reads one snapshot of catalog and orders per call and never writes.
    Orders committed while the selection runs are not reflected.
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        rng: random.Random | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._rng = rng or random.Random()

    async def recommend(self, limit: int = 8) -> list[RecommendationResult]:
        async with self._uow_factory() as uow:
            catalog = await uow.catalog.list_catalog_items()
            orders = await uow.orders.list_orders()

        histories = [order.isbns for order in orders]
        logger.debug(
            "Recommending from %d books and %d orders (limit=%d)",
            len(catalog),
            len(histories),
            limit,
        )
        return select_recommendations(catalog, histories, limit, self._rng)
