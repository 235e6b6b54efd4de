"""Recommendation routes."""

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_recommender
from app.api.schemas import RecommendationItem, RecommendationsResponse
from app.config import settings
from app.ports.recommender import RecommenderPort

router = APIRouter(prefix="/api/books", tags=["Recommendations"])


@router.get("/recommended_books", response_model=RecommendationsResponse)
async def get_recommendations(
    limit: int | None = Query(None, ge=1, le=50),
    recommender: RecommenderPort = Depends(get_recommender),
) -> RecommendationsResponse:
    """Books bought together in similar orders, topped up at random."""
    results = await recommender.recommend(limit=limit or settings.recommendation_size)
    items = [RecommendationItem.from_item(r.item, r.score, r.reason) for r in results]
    return RecommendationsResponse(recommendations=items, count=len(items))
