"""Per-request access log for the catalog.

Each request produces one record carrying the HTTP details plus who made it
and which species it touched, so a record's edit history can be followed in
the logs.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from speciescatalog.utils.auth import CatalogUser

logger = logging.getLogger(__name__)


def _catalog_fields(request: Request) -> dict[str, Any]:
    """Viewer and species identifiers, once routing and authentication have run.

    Inner middleware and the router write ``user`` and ``path_params`` into the
    shared ASGI scope, so they are only readable after ``call_next`` returns.
    """
    fields: dict[str, Any] = {}
    user = request.scope.get("user")
    if isinstance(user, CatalogUser):
        fields["profile_id"] = str(user.profile_id)
    species_id = request.scope.get("path_params", {}).get("species_id")
    if species_id is not None:
        fields["species_id"] = species_id
    return fields


class StructuredRequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its timing, viewer and species."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        fields: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": elapsed_ms,
            **_catalog_fields(request),
        }
        if request.url.query:
            fields["query"] = str(request.url.query)
        if request.client:
            fields["client_host"] = request.client.host
        if user_agent := request.headers.get("user-agent"):
            fields["user_agent"] = user_agent

        # 5xx responses log at WARNING
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level, "%s %s %d", request.method, request.url.path, response.status_code, extra=fields
        )
        return response
