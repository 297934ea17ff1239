from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from auto_messenger.config import Settings, get_settings
from auto_messenger.messaging.api.routes import router as control_router
from auto_messenger.messaging.infrastructure.dependencies import (
    build_cache,
    build_message_sender,
)
from auto_messenger.messaging.infrastructure.persistence.repositories import SQLAMessageStore
from auto_messenger.messaging.infrastructure.persistence.seed import seed_demo_messages
from auto_messenger.shared.database import (
    close_database_engine,
    create_database_engine,
    create_tables,
    get_session_factory,
)
from auto_messenger.shared.exceptions import register_exception_handlers
from auto_messenger.shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON or settings.is_production)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_database_engine(settings.DATABASE_URL)
        await create_tables()
        cache = await build_cache(settings)
        http_client = httpx.AsyncClient()

        store = SQLAMessageStore(get_session_factory())
        if settings.SEED_DEMO_MESSAGES:
            await seed_demo_messages(store)

        sender = build_message_sender(settings, store, cache, http_client)
        app.state.message_sender = sender
        if settings.AUTO_START:
            await sender.start()
        logger.info(
            "Application started",
            environment=settings.ENVIRONMENT,
            auto_start=settings.AUTO_START,
        )
        try:
            yield
        finally:
            await sender.stop()
            app.state.message_sender = None
            await http_client.aclose()
            await cache.close()
            await close_database_engine()
            logger.info("Application stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.include_router(control_router)

    # Centralized error handling → {code, message, details?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": "Automatic message sender",
            "docs": "/docs",
            "health": "/health",
        }

    return app
