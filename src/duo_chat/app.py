from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from duo_chat.api.middleware.request_context import RequestContextMiddleware
from duo_chat.api.v1.routers import health, messages, users, ws
from duo_chat.application.exceptions import NotFoundError, ValidationError
from duo_chat.application.ports.media import MediaStore
from duo_chat.config import settings
from duo_chat.infrastructure.bus.local import LocalMessageBus
from duo_chat.infrastructure.bus.redis_pubsub import RedisMessageBus, RedisMessageSubscriber
from duo_chat.infrastructure.media.store import HttpUploadMediaStore, PassthroughMediaStore
from duo_chat.infrastructure.ws.manager import ConnectionManager
from duo_chat.infrastructure.ws.registry import ConnectionRegistry
from duo_chat.services.delivery_service import MessageDeliveryRouter
from duo_chat.services.presence_service import PresenceBroadcaster

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if settings.DELIVERY_BUS != "redis":
        yield
        return

    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    app.state.message_bus = RedisMessageBus(app.state.redis, settings.REDIS_PUBSUB_CHANNEL)
    # Whatever any process publishes is delivered to the receivers held here.
    subscriber = RedisMessageSubscriber(
        app.state.redis,
        settings.REDIS_PUBSUB_CHANNEL,
        LocalMessageBus(app.state.delivery).publish,
    )
    await subscriber.start()
    app.state.pubsub_subscriber = subscriber

    yield

    await subscriber.stop()
    await app.state.redis.aclose()
    app.state.redis = None
    logger.info("Redis connection pool closed")


def _build_media_store() -> MediaStore:
    if settings.MEDIA_UPLOAD_URL:
        return HttpUploadMediaStore(
            settings.MEDIA_UPLOAD_URL,
            settings.MEDIA_UPLOAD_FOLDER,
            settings.MEDIA_UPLOAD_TIMEOUT,
        )
    return PassthroughMediaStore()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Duo Chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    registry = ConnectionRegistry()
    connections = ConnectionManager()
    app.state.registry = registry
    app.state.connections = connections
    app.state.presence = PresenceBroadcaster(registry, connections)
    app.state.delivery = MessageDeliveryRouter(registry, connections)
    app.state.message_bus = LocalMessageBus(app.state.delivery)
    app.state.media_store = _build_media_store()
    app.state.redis = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
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
