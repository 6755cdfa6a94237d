"""FastAPI application factory for the notification service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import partial

import anyio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notifier.config import get_settings
from notifier.infrastructure.channels import build_channel_provider
from notifier.infrastructure.database import SessionLocal, engine, initialize_database
from notifier.infrastructure.notifications import notification_publisher
from notifier.infrastructure.queue import NotificationQueue, run_notification_worker
from notifier.interfaces.api.routes import register_routes
from notifier.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the queue worker on startup and drain it on shutdown."""

    settings = get_settings()
    initialize_database()
    channels = build_channel_provider(settings)
    queue = NotificationQueue(max_buffer=settings.notification_queue_max_buffer)
    app.state.channels = channels
    app.state.notification_queue = queue

    worker = partial(
        run_notification_worker,
        queue,
        session_factory=SessionLocal,
        publisher=notification_publisher,
        channels=channels,
        settings=settings,
    )
    try:
        async with anyio.create_task_group() as task_group:
            await task_group.start(worker)
            try:
                yield
            finally:
                queue.close()
    finally:
        app.state.notification_queue = None
        await channels.aclose()
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    configure_logging(settings.log_level.upper())

    app = FastAPI(title="Notifier", lifespan=lifespan)
    if settings.ws_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.ws_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_routes(app)
    return app


app = create_app()
