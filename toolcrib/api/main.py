"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolcrib.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from toolcrib.api.middleware.error_handler import setup_exception_handlers
from toolcrib.api.routes import (
    catalog_router,
    health_router,
    inbound_router,
    inventory_router,
    outbound_router,
    tool_changes_router,
)
from toolcrib.application.services import ServiceContainer, build_container
from toolcrib.config import Settings, configure_logging, get_logger, get_settings
from toolcrib.infrastructure.storage.sqlite.migrations import initialize_database

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Configures logging from the app settings, then migrates the database
    and builds the service container unless one was injected. Closes what
    it built on shutdown.
    """
    settings: Settings = app.state.settings
    configure_logging(settings)
    owns_container = app.state.container is None

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
    )

    if owns_container:
        try:
            await initialize_database(settings.storage.db_path)
            logger.info("database_initialized")

            container = build_container(settings)
            await container.pool.initialize()  # type: ignore[union-attr]
            app.state.container = container
            logger.info("connection_pool_ready")
        except Exception as e:
            logger.error("database_init_failed", error=str(e))
            raise

    logger.info("application_started")

    yield

    logger.info("application_stopping")
    if owns_container:
        await app.state.container.close()
        app.state.container = None
    logger.info("application_stopped")


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Settings override (default: the container's, else loaded)
        container: Prebuilt services; when given, the lifespan leaves
            database setup to the caller

    Returns:
        Configured FastAPI instance
    """
    if settings is None:
        settings = container.settings if container is not None else get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Endmill stock ledger: receiving, dispensing and tool-change history",
        version=settings.app_version,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.container = container

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)

    # Movement routers before /api/inventory/{aggregate_id}
    app.include_router(health_router)
    app.include_router(inbound_router)
    app.include_router(outbound_router)
    app.include_router(inventory_router)
    app.include_router(tool_changes_router)
    app.include_router(catalog_router)

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "toolcrib.api.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    run()
