"""Application lifespan management for startup and shutdown events."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from speciescatalog.system.structlog_configurator import configure_structlog
from speciescatalog.web.core.container import Container

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Context manager for application startup and shutdown events.

    Configures logging, mounts static files and creates the database schema
    before serving; disposes of the database engine on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control back to the application for normal operation.
    """
    # Get the container from the app (runtime dynamic attribute)
    container: Container = app.container  # type: ignore[attr-defined]

    config = container.config()
    configure_structlog(config)

    path_resolver = container.path_resolver()
    app.mount(
        "/static",
        StaticFiles(directory=path_resolver.get_static_dir()),
        name="static",
    )

    database = container.database()
    logger.info("Starting species catalog (database at %s)", database.db_path)

    try:
        await database.initialize()
        logger.info("Database initialized")

        yield

    finally:
        logger.info("Shutting down species catalog...")
        await database.dispose()
