"""FastAPI dependencies: repository wiring and caller identity."""

import random
from collections.abc import Callable
from functools import partial

from fastapi import Depends, Header, HTTPException, status

from app.adapters.recommender.co_purchase import CoPurchaseRecommenderAdapter
from app.adapters.repository.memory import InMemoryStore, InMemoryUnitOfWork
from app.adapters.repository.relational import SqlAlchemyUnitOfWork
from app.config import RepositoryBackend, settings
from app.ports.recommender import RecommenderPort
from app.ports.unit_of_work import UnitOfWork

_memory_store = InMemoryStore()


def get_uow_factory() -> Callable[[], UnitOfWork]:
    """Return a callable that opens a fresh unit of work per call."""
    if settings.repository_backend is RepositoryBackend.MEMORY:
        return partial(InMemoryUnitOfWork, _memory_store)

    from app.database import async_session_factory

    return partial(SqlAlchemyUnitOfWork, async_session_factory)


def get_unit_of_work(
    factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> UnitOfWork:
    return factory()


def get_recommender(
    factory: Callable[[], UnitOfWork] = Depends(get_uow_factory),
) -> RecommenderPort:
    return CoPurchaseRecommenderAdapter(factory, rng=random.Random(settings.recommendation_seed))


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Buyer reference set by the session layer in front of this service."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return x_user_id.strip()
