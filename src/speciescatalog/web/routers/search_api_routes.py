"""JSON API for the autofill search panel."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from speciescatalog.notifications.toasts import ToastQueue
from speciescatalog.search.client import SearchClient, SearchSession
from speciescatalog.utils.auth import current_profile_id
from speciescatalog.web.core.container import Container
from speciescatalog.web.models.species import SearchStateResponse

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(current_profile_id)])


@router.get("/search", response_model=SearchStateResponse)
@inject
async def search_pages(
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
    q: Annotated[str, Query(description="Search text; empty queries are still sent")] = "",
) -> SearchStateResponse:
    """Run one search submission and return the panel state it ends in."""
    toasts = ToastQueue()
    search = SearchSession(search_client, toasts)
    await search.submit(q)

    snapshot = search.snapshot()
    return SearchStateResponse(
        status=snapshot["status"],
        query=snapshot["query"],
        results=search.results,
        error=snapshot["error"],
        toasts=toasts.drain(),
    )
