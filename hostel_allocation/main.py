from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hostel_allocation.api.v1.router import router as api_v1_router
from hostel_allocation.config.database import Database, create_database
from hostel_allocation.config.logging import get_logger, setup_logging
from hostel_allocation.config.settings import Settings, settings as default_settings
from hostel_allocation.core.middleware import register_middlewares
from hostel_allocation.services.allocation.side_effect_dispatcher import SideEffectDispatcher

logger = get_logger(__name__)

SHUTDOWN_FLUSH_SECONDS = 10.0


def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Builds the Database and SideEffectDispatcher and stores them on app.state.
    - Registers CORS, core middleware, and exception handlers.
    - Includes the versioned API router under API_V1_STR.
    """
    config = config or default_settings
    if configure_logging:
        setup_logging(config)
    database = database or create_database(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not config.is_production():
            # Schema migrations are out of scope; dev and test create tables directly
            database.create_all()
        app.state.dispatcher = SideEffectDispatcher.from_settings(database, config)
        logger.info(f"{config.APP_NAME} started", extra={"environment": config.ENVIRONMENT})
        try:
            yield
        finally:
            dispatcher = app.state.dispatcher
            if not dispatcher.flush(timeout=SHUTDOWN_FLUSH_SECONDS):
                logger.warning("Side effects still pending at shutdown")
            dispatcher.shutdown()
            database.dispose()

    app = FastAPI(
        title=config.APP_NAME,
        debug=config.DEBUG,
        version=config.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)

    app.include_router(api_v1_router, prefix=config.API_V1_STR)

    return app


app = create_app()
