from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from realtime_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from realtime_chat.api.middleware.metrics import RequestTimingMiddleware
from realtime_chat.api.middleware.rate_limit import RateLimitMiddleware
from realtime_chat.api.v1.routers import health, messages, ws
from realtime_chat.application.exceptions import (
    NotFoundError,
    ValidationError,
)
from realtime_chat.config import settings
from realtime_chat.infrastructure.ratelimit.redis_limiter import RedisRateLimiter
from realtime_chat.infrastructure.ws.manager import ConnectionManager
from realtime_chat.infrastructure.ws.presence import PresenceRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    app.state.rate_limiter = RedisRateLimiter(
        app.state.redis,
        limit=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        prefix=settings.RATE_LIMIT_PREFIX,
    )
    logger.info("Redis connection pool created")

    yield

    app.state.rate_limiter = None
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Realtime Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Presence and connections are process-local; no cross-instance fan-out.
    app.state.connections = ConnectionManager()
    app.state.presence = PresenceRegistry()
    app.state.rate_limiter = None

    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
