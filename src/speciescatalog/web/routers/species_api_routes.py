"""JSON API for species records and per-field validation."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.species.schema import validate_field
from speciescatalog.utils.auth import current_profile_id
from speciescatalog.utils.result import Err
from speciescatalog.web.core.container import Container
from speciescatalog.web.models.species import (
    FieldValidationRequest,
    FieldValidationResponse,
    SpeciesListResponse,
    SpeciesRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/species", dependencies=[Depends(current_profile_id)])


@router.get("", response_model=SpeciesListResponse)
@inject
async def list_species(
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
    q: Annotated[str | None, Query(description="Filter by scientific or common name")] = None,
) -> SpeciesListResponse:
    """List species, optionally filtered by name."""
    result = await species_repository.list_species(q)
    if isinstance(result, Err):
        raise HTTPException(status_code=500, detail=result.message)
    species = [SpeciesRead.model_validate(row) for row in result.value]
    return SpeciesListResponse(species=species, count=len(species), query=q)


@router.get("/{species_id}", response_model=SpeciesRead)
@inject
async def get_species(
    species_id: int,
    species_repository: Annotated[
        SpeciesRepository, Depends(Provide[Container.species_repository])
    ],
) -> SpeciesRead:
    """Get one species by id."""
    result = await species_repository.get(species_id)
    if isinstance(result, Err):
        raise HTTPException(status_code=404, detail=result.message)
    return SpeciesRead.model_validate(result.value)


@router.post("/validate", response_model=FieldValidationResponse)
async def validate_species_field(
    payload: FieldValidationRequest,
) -> FieldValidationResponse:
    """Validate one field as the user types.

    The browser calls this on every change and disables submit while any
    field reports ``valid: false``.
    """
    try:
        result = validate_field(payload.field, payload.value)
    except KeyError:
        raise HTTPException(
            status_code=422, detail=f"Unknown species field: {payload.field}"
        ) from None

    if isinstance(result, Err):
        return FieldValidationResponse(field=payload.field, valid=False, error=result.message)
    return FieldValidationResponse(
        field=payload.field, valid=True, value=jsonable_encoder(result.value)
    )
