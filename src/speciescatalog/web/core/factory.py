"""Application factory for creating FastAPI application with dependency injection."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.authentication import AuthenticationMiddleware
from starsessions import CookieStore, SessionMiddleware

from speciescatalog.species.edit_session import EditNotPermittedError, InvalidTransitionError
from speciescatalog.utils.auth import SessionAuthBackend
from speciescatalog.web.core.container import Container
from speciescatalog.web.core.lifespan import lifespan
from speciescatalog.web.middleware.request_logging import StructuredRequestLoggingMiddleware
from speciescatalog.web.routers import (
    auth_routes,
    health_api_routes,
    search_api_routes,
    species_api_routes,
    species_view_routes,
)

logger = logging.getLogger(__name__)


async def edit_not_permitted_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Refused change to %s: %s", request.url.path, exc)
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def invalid_transition_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Invalid edit transition on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create FastAPI application with dependency injection.

    This factory function creates a fully configured FastAPI application with:
    - Dependency injection container setup
    - Session, authentication and request logging middleware
    - All routers properly configured with prefixes and tags
    - Lifespan management for startup and shutdown

    Returns:
        FastAPI: The configured application instance.
    """
    container = Container()
    config = container.config()

    app = FastAPI(
        lifespan=lifespan,
        title=f"{config.site_name} API",
        description="API for browsing and curating species records",
        version="1.0.0",
    )
    app.container = container  # type: ignore[attr-defined]

    # Middleware added later wraps earlier ones: the session must be loaded
    # before the authentication backend reads it.
    app.add_middleware(AuthenticationMiddleware, backend=SessionAuthBackend())
    app.add_middleware(
        SessionMiddleware,
        store=CookieStore(secret_key=config.session_secret),
        lifetime=config.session_lifetime_seconds,
        cookie_https_only=False,
    )
    app.add_middleware(StructuredRequestLoggingMiddleware)

    app.add_exception_handler(EditNotPermittedError, edit_not_permitted_handler)
    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)

    # Wire dependencies for all router modules
    container.wire(
        modules=[
            "speciescatalog.web.routers.auth_routes",
            "speciescatalog.web.routers.health_api_routes",
            "speciescatalog.web.routers.search_api_routes",
            "speciescatalog.web.routers.species_api_routes",
            "speciescatalog.web.routers.species_view_routes",
        ]
    )

    # === API Routes (included in documentation) ===
    app.include_router(species_api_routes.router, prefix="/api", tags=["Species API"])
    app.include_router(search_api_routes.router, prefix="/api", tags=["Search API"])
    app.include_router(health_api_routes.router, prefix="/api", tags=["Health Check API"])

    # === View Routes (excluded from API documentation) ===
    app.include_router(auth_routes.router, tags=["Auth"])
    app.include_router(
        species_view_routes.router,
        tags=["Species Views"],
        include_in_schema=False,
    )

    return app
