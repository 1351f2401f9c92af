"""HTML routes for browsing, adding, editing and deleting species.

Every request builds its own ``SpeciesDetailDialog``; toasts raised while
handling a request are parked in the session and shown on the next rendered
page, so a post/redirect/get cycle still displays them once.
"""

import logging
from collections.abc import Mapping
from typing import Annotated, Any

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from speciescatalog.config import SpeciesCatalogConfig
from speciescatalog.notifications.toasts import (
    Notifier,
    SessionToastNotifier,
    Severity,
    pop_session_toasts,
)
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.search.client import SearchClient, SearchSession
from speciescatalog.species.dialog import SpeciesDetailDialog, decline
from speciescatalog.species.edit_session import Confirm
from speciescatalog.species.models import EDITABLE_FIELDS, Kingdom
from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.species.schema import (
    ENDANGERED_CHOICES,
    endangered_token,
    validate_field,
    validate_record,
)
from speciescatalog.utils.auth import require_login, viewer_id
from speciescatalog.utils.result import Err
from speciescatalog.web.core.container import Container

logger = logging.getLogger(__name__)

router = APIRouter()


def _page_context(
    request: Request, config: SpeciesCatalogConfig, page_name: str
) -> dict[str, Any]:
    """Context every page template expects."""
    return {
        "site_name": config.site_name,
        "page_name": page_name,
        "user": request.user,
        "toasts": pop_session_toasts(request.session),
    }


def _submitted_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    """Editable fields present in a form or query string."""
    return {field: data[field] for field in EDITABLE_FIELDS if field in data}


def _confirmed(data: Mapping[str, Any]) -> Confirm:
    """Confirmation callback answering with the browser's ``confirmed`` flag."""
    answer = str(data.get("confirmed", "")).lower() == "true"
    return lambda prompt: answer


async def _open_dialog(
    request: Request,
    species_id: int,
    species_repository: SpeciesRepository,
    profile_repository: ProfileRepository,
    search_client: SearchClient,
    notifier: Notifier,
    confirm: Confirm | None = None,
) -> SpeciesDetailDialog:
    """Load the record and build a fresh dialog for this request."""
    result = await species_repository.get(species_id)
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail=result.message)

    return SpeciesDetailDialog(
        result.value,
        viewer_id(request),
        species_repository,
        profile_repository,
        search_client,
        notifier,
        confirm or decline,
    )


async def _render_dialog(
    request: Request,
    templates: Jinja2Templates,
    config: SpeciesCatalogConfig,
    dialog: SpeciesDetailDialog,
    status_code: int = 200,
) -> HTMLResponse:
    await dialog.wait_for_authors()
    context = _page_context(request, config, dialog.species.scientific_name)
    context.update(dialog.render_context())
    return templates.TemplateResponse(
        request, "species/detail.html.j2", context, status_code=status_code
    )


def _new_species_context(
    values: dict[str, Any], errors: dict[str, str], search: SearchSession
) -> dict[str, Any]:
    return {
        "values": values,
        "errors": errors,
        "kingdoms": [kingdom.value for kingdom in Kingdom],
        "endangered_choices": list(ENDANGERED_CHOICES),
        "endangered_token": endangered_token(values.get("endangered")),
        "search": search.snapshot(),
    }


@router.get("/", include_in_schema=False)
async def read_root() -> RedirectResponse:
    """The catalog is the landing page."""
    return RedirectResponse(url="/species", status_code=303)


@router.get("/species", response_class=HTMLResponse)
@require_login
@inject
async def list_species(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    q: Annotated[str | None, Query(description="Filter by scientific or common name")] = None,
) -> HTMLResponse:
    """Browse the catalog, optionally filtered by name."""
    result = await species_repository.list_species(q)
    if isinstance(result, Err):
        SessionToastNotifier(request.session).notify(
            "Something went wrong.", result.message, Severity.DESTRUCTIVE
        )
        species = []
    else:
        species = result.value

    context = _page_context(request, config, "Species")
    context.update({"species": species, "query": q or ""})
    return templates.TemplateResponse(request, "species/list.html.j2", context)


@router.get("/species/new", response_class=HTMLResponse)
@require_login
@inject
async def new_species_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
    q: str | None = None,
    result: int | None = None,
) -> HTMLResponse:
    """Show the add-species form with its autofill search panel.

    Field values travel in the query string so a search submission keeps
    what the user already typed; ``result`` copies a hit into the form.
    """
    values: dict[str, Any] = {field: None for field in EDITABLE_FIELDS}
    values.update(_submitted_fields(request.query_params))
    errors: dict[str, str] = {}

    search = SearchSession(search_client, SessionToastNotifier(request.session))
    if q is not None:
        await search.submit(q)
        if result is not None:
            try:
                description, image = search.select(result)
            except IndexError:
                raise HTTPException(status_code=404, detail="No such search result") from None
            for field, value in (("description", description), ("image", image)):
                if value:
                    values[field] = value
                    validated = validate_field(field, value)
                    if isinstance(validated, Err):
                        errors[field] = validated.message

    context = _page_context(request, config, "Add species")
    context.update(_new_species_context(values, errors, search))
    return templates.TemplateResponse(request, "species/new.html.j2", context)


@router.post("/species/new", response_model=None)
@require_login
@inject
async def create_species(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
) -> HTMLResponse | RedirectResponse:
    """Validate the submitted form and store a new species authored by the viewer."""
    form = await request.form()
    values: dict[str, Any] = {field: None for field in EDITABLE_FIELDS}
    values.update(_submitted_fields(form))
    notifier = SessionToastNotifier(request.session)

    normalized, errors = validate_record(values)
    if not errors:
        created = await species_repository.create(normalized, request.user.profile_id)
        if not isinstance(created, Err):
            notifier.notify(
                "Species added.", f"Added {created.value.scientific_name} to the catalog."
            )
            return RedirectResponse(url=f"/species/{created.value.id}", status_code=303)
        notifier.notify("Something went wrong.", created.message, Severity.DESTRUCTIVE)

    context = _page_context(request, config, "Add species")
    context.update(
        _new_species_context(values, errors, SearchSession(search_client, notifier))
    )
    return templates.TemplateResponse(
        request, "species/new.html.j2", context, status_code=422 if errors else 500
    )


@router.get("/species/{species_id}", response_class=HTMLResponse)
@require_login
@inject
async def species_detail(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    profile_repository: Annotated[
        ProfileRepository, Depends(Provide[Container.profile_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
    mode: str | None = None,
) -> HTMLResponse:
    """Show the detail dialog, in Editing mode when ``?mode=edit``."""
    dialog = await _open_dialog(
        request,
        species_id,
        species_repository,
        profile_repository,
        search_client,
        SessionToastNotifier(request.session),
    )
    if mode == "edit":
        dialog.session.start_edit()
    dialog.open()
    return await _render_dialog(request, templates, config, dialog)


@router.post("/species/{species_id}", response_model=None)
@require_login
@inject
async def confirm_species_edit(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    profile_repository: Annotated[
        ProfileRepository, Depends(Provide[Container.profile_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
) -> HTMLResponse | RedirectResponse:
    """Save the edit form as one full-record update."""
    form = await request.form()
    dialog = await _open_dialog(
        request,
        species_id,
        species_repository,
        profile_repository,
        search_client,
        SessionToastNotifier(request.session),
    )
    dialog.session.start_edit()
    dialog.session.update_fields(_submitted_fields(form))

    result = await dialog.session.confirm_edit()
    if isinstance(result, Err):
        status_code = 422 if dialog.session.errors else 500
        return await _render_dialog(request, templates, config, dialog, status_code)

    return RedirectResponse(url=f"/species/{species_id}", status_code=303)


@router.post("/species/{species_id}/cancel", response_model=None)
@require_login
@inject
async def cancel_species_edit(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    profile_repository: Annotated[
        ProfileRepository, Depends(Provide[Container.profile_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
) -> HTMLResponse | RedirectResponse:
    """Discard unsaved changes once the user confirmed; otherwise keep editing."""
    form = await request.form()
    dialog = await _open_dialog(
        request,
        species_id,
        species_repository,
        profile_repository,
        search_client,
        SessionToastNotifier(request.session),
        confirm=_confirmed(form),
    )
    dialog.session.start_edit()
    dialog.session.update_fields(_submitted_fields(form))

    if dialog.session.cancel():
        return RedirectResponse(url=f"/species/{species_id}", status_code=303)
    return await _render_dialog(request, templates, config, dialog)


@router.post("/species/{species_id}/delete")
@require_login
@inject
async def delete_species(
    request: Request,
    species_id: int,
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    profile_repository: Annotated[
        ProfileRepository, Depends(Provide[Container.profile_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
) -> RedirectResponse:
    """Delete the species once the user confirmed; otherwise return to it."""
    form = await request.form()
    dialog = await _open_dialog(
        request,
        species_id,
        species_repository,
        profile_repository,
        search_client,
        SessionToastNotifier(request.session),
        confirm=_confirmed(form),
    )
    if await dialog.session.delete():
        return RedirectResponse(url="/species", status_code=303)
    return RedirectResponse(url=f"/species/{species_id}", status_code=303)


@router.get("/species/{species_id}/search", response_class=HTMLResponse)
@require_login
@inject
async def search_in_dialog(
    request: Request,
    species_id: int,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    profile_repository: Annotated[
        ProfileRepository, Depends(Provide[Container.profile_repository])
    ],
    search_client: Annotated[SearchClient, Depends(Provide[Container.search_client])],
    q: str = "",
    result: int | None = None,
) -> HTMLResponse:
    """Run the autofill search from the edit form and optionally apply a hit."""
    dialog = await _open_dialog(
        request,
        species_id,
        species_repository,
        profile_repository,
        search_client,
        SessionToastNotifier(request.session),
    )
    dialog.session.start_edit()
    dialog.open()
    dialog.session.update_fields(_submitted_fields(request.query_params))

    await dialog.search.submit(q)
    if result is not None:
        try:
            dialog.apply_search_result(result)
        except IndexError:
            raise HTTPException(status_code=404, detail="No such search result") from None

    return await _render_dialog(request, templates, config, dialog)
