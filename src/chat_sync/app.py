from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_sync.api.middleware.correlation_id import CorrelationIdMiddleware
from chat_sync.api.v1.routers import chats, health, ws
from chat_sync.application.exceptions import GatewayError, PopulationError, ValidationError
from chat_sync.application.ports.bus import UpdatePublisher
from chat_sync.config import settings
from chat_sync.infrastructure.bus.local import LocalUpdatePublisher
from chat_sync.infrastructure.bus.redis_pubsub import RedisPubSubPublisher, RedisUpdateSubscriber
from chat_sync.infrastructure.ws.manager import ConnectionManager
from chat_sync.services.broadcaster import ChatUpdateBroadcaster

logger = logging.getLogger(__name__)


def _broadcaster(publisher: UpdatePublisher) -> ChatUpdateBroadcaster:
    return ChatUpdateBroadcaster(publisher, participant_scoped=settings.PARTICIPANT_SCOPED_UPDATES)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Switch to the Redis bus when configured; otherwise fan out in-process."""
    if settings.EVENT_BUS != "redis":
        logger.info("Using in-process update fan-out")
        yield
        return

    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    app.state.redis = redis
    subscriber = RedisUpdateSubscriber(redis, settings.REDIS_PUBSUB_CHANNEL, app.state.connections)
    await subscriber.start()
    app.state.broadcaster = _broadcaster(RedisPubSubPublisher(redis, settings.REDIS_PUBSUB_CHANNEL))
    logger.info("Using Redis update fan-out on %s", settings.REDIS_PUBSUB_CHANNEL)

    try:
        yield
    finally:
        await subscriber.stop()
        await redis.aclose()
        logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Chat Sync Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # replaced by the lifespan when EVENT_BUS=redis
    app.state.connections = ConnectionManager()
    app.state.broadcaster = _broadcaster(LocalUpdatePublisher(app.state.connections))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(chats.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def _malformed_body(req: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Malformed request on %s: %s", req.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Invalid request body"})

    @app.exception_handler(GatewayError)
    async def _gateway(req: Request, exc: GatewayError) -> JSONResponse:
        if isinstance(exc, PopulationError):
            logger.warning("Write applied but response could not be built for %s: %s", req.url.path, exc.detail)
        else:
            logger.warning("Gateway failure on %s: %s", req.url.path, exc.detail)
        return JSONResponse(status_code=500, content={"detail": exc.detail})
