"""FastAPI application factory — entry point for the bookstore order service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.checkout import router as checkout_router
from app.api.routes.orders import router as orders_router
from app.api.routes.recommendations import router as recommendations_router
from app.config import settings
from app.domain.errors import CheckoutError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown events."""
    logger.info("Bookstore orders starting up...")
    logger.info("Repository backend: %s", settings.repository_backend.value)
    logger.info("Stock lock strategy: %s", settings.stock_lock_strategy.value)
    logger.info("Recommendation size: %d", settings.recommendation_size)
    yield
    logger.info("Bookstore orders shutting down...")


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Bookstore Orders",
        description="Checkout and co-purchase recommendations for the online bookstore",
        version="1.0.0",
        lifespan=lifespan,
    )

    # ── Middleware ──────────────────────────────────
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ─────────────────────────────────────
    application.add_exception_handler(CheckoutError, checkout_error_handler)

    # ── Routes ─────────────────────────────────────
    application.include_router(checkout_router)
    application.include_router(orders_router)
    application.include_router(recommendations_router)

    # ── Health Check ───────────────────────────────
    @application.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "bookstore-orders"}

    return application


app = create_app()
