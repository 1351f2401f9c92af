"""Species and search API request/response models."""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from speciescatalog.notifications.toasts import Toast
from speciescatalog.search.models import SearchResult
from speciescatalog.species.models import Kingdom


class SpeciesRead(BaseModel):
    """A stored species record as returned by the JSON API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    scientific_name: str
    common_name: str | None
    kingdom: Kingdom
    endangered: bool | None
    total_population: int | None
    image: str | None
    description: str | None
    author: uuid.UUID


class SpeciesListResponse(BaseModel):
    """Species matching an optional query."""

    species: list[SpeciesRead]
    count: int
    query: str | None = None


class FieldValidationRequest(BaseModel):
    """One field's raw input, validated as the user types."""

    field: str = Field(..., description="Editable species field name")
    value: Any = Field(None, description="Raw input value")


class FieldValidationResponse(BaseModel):
    """Outcome of validating one field."""

    field: str
    valid: bool
    value: Any = Field(None, description="Normalized value when valid")
    error: str | None = None


class SearchStateResponse(BaseModel):
    """Snapshot of a search panel after one submission."""

    status: str
    query: str
    results: list[SearchResult]
    error: str | None = None
    toasts: list[Toast] = Field(default_factory=list)
