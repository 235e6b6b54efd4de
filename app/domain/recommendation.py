"""
Tiered recommendation selection from order co-occurrence.

Tier 0  no history: random sample of the whole catalog.
Tier 1  items shared by similar orders, best Jaccard score first.
Tier 2  random fill from books bought at least once.
Tier 3  random fill from books never bought.

A tier only runs when the previous ones left the list short, so the result
always holds ``min(limit, len(catalog))`` distinct books.
"""

import logging
import random
from collections.abc import Sequence

from app.domain.entities import CatalogItem
from app.domain.similarity import compute_similarities, intersection_items
from app.ports.recommender import (
    REASON_CATALOG,
    REASON_CO_PURCHASED,
    REASON_PREVIOUSLY_PURCHASED,
    RecommendationResult,
)

logger = logging.getLogger(__name__)


def _sample(
    rng: random.Random,
    candidates: list[CatalogItem],
    needed: int,
    reason: str,
) -> list[RecommendationResult]:
    if needed <= 0 or not candidates:
        return []
    picks = rng.sample(candidates, min(needed, len(candidates)))
    return [RecommendationResult(item=item, score=0.0, reason=reason) for item in picks]


def select_recommendations(
    catalog: Sequence[CatalogItem],
    histories: Sequence[frozenset[str]],
    limit: int,
    rng: random.Random,
) -> list[RecommendationResult]:
    """Pick ``limit`` distinct books; read-only over its inputs."""
    if limit <= 0 or not catalog:
        return []

    catalog = list(catalog)
    if not histories:
        results = _sample(rng, catalog, limit, REASON_CATALOG)
        logger.info("Recommendations: no order history, %d catalog picks", len(results))
        return results

    by_isbn = {item.isbn: item for item in catalog}
    selected: dict[str, RecommendationResult] = {}

    ranked = sorted(compute_similarities(histories), key=lambda s: (-s.score, s.pair))
    for similarity in ranked:
        for isbn in sorted(intersection_items(histories, similarity.pair)):
            # books deleted from the catalog since purchase are skipped
            if isbn in by_isbn and isbn not in selected:
                selected[isbn] = RecommendationResult(
                    item=by_isbn[isbn],
                    score=similarity.score,
                    reason=REASON_CO_PURCHASED,
                )
    results = list(selected.values())[:limit]
    tier1 = len(results)

    chosen = {result.item.isbn for result in results}
    purchased = frozenset().union(*histories)

    history_pool = [i for i in catalog if i.isbn in purchased and i.isbn not in chosen]
    results += _sample(rng, history_pool, limit - len(results), REASON_PREVIOUSLY_PURCHASED)
    tier2 = len(results) - tier1

    chosen = {result.item.isbn for result in results}
    fresh_pool = [i for i in catalog if i.isbn not in purchased and i.isbn not in chosen]
    results += _sample(rng, fresh_pool, limit - len(results), REASON_CATALOG)

    logger.info(
        "Recommendations: %d pairs, tier1=%d tier2=%d tier3=%d",
        len(ranked),
        tier1,
        tier2,
        len(results) - tier1 - tier2,
    )
    return results
