"""Application Factory — FastAPI app wired with phial logging, database and error handlers.

Invariants:
    - Routers are included explicitly, in the order given
    - Database initialized on startup and disposed on shutdown via lifespan
    - Error handlers registered before any router is included
"""

import logging
from collections.abc import Iterable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from phial.api.error_handlers import register_error_handlers
from phial.config import Settings, get_settings
from phial.infrastructure.database import close_db, init_db
from phial.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    routers: Iterable[APIRouter] = (),
    **fastapi_kwargs,
) -> FastAPI:
    """Build a FastAPI app; extra keyword arguments go to FastAPI()."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            echo=settings.database_echo,
        )
        logger.info("Application started")
        yield
        await close_db()
        logger.info("Application shutting down")

    app = FastAPI(lifespan=lifespan, **fastapi_kwargs)
    register_error_handlers(app)
    for router in routers:
        app.include_router(router)
    return app
