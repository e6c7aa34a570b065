"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.exceptions import RedisError

from app.api.v1.router import api_router
from app.config import settings
from app.core.database import close_db, init_db
from app.core.logging import setup_logging
from app.core.redis import close_redis, get_redis_client
from app.services.press_release.scoring_tables import get_scoring_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()

    tables = get_scoring_tables()
    logger.info(
        "Starting Pressroom",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "scoring_tables_version": tables.version,
            "brief_enrichment_enabled": settings.brief_enrichment_enabled,
            "model_fast": settings.get_model("fast"),
        },
    )

    if settings.environment == "development":
        await init_db()
        logger.info("Development database initialized")

    yield

    logger.info("Shutting down Pressroom")
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Press release generation service: scored angles and headlines, "
            "templated drafts, SEO and readability summaries, live progress."
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and backend version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    @app.get(
        "/health/redis",
        summary="Progress backend health check",
        description="Ping the Redis instance that carries generation progress.",
    )
    async def redis_health_check() -> dict[str, Any]:
        """Redis health endpoint."""
        try:
            reachable = bool(await get_redis_client().ping())
        except RedisError:
            logger.warning("Redis health check failed", exc_info=True)
            reachable = False
        return {
            "status": "healthy" if reachable else "degraded",
            "version": settings.app_version,
            "redis": reachable,
        }

    return app


app = create_app()
