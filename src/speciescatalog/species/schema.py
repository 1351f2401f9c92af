"""Field rules and normalization for species form input.

Each editable field has an annotated type whose validators both check and
normalize raw input (trimming, blank-to-null collapse). The same rules back
per-field immediate validation and whole-record validation before saving.
"""

import logging
from collections.abc import Mapping
from functools import cache
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    BeforeValidator,
    Field,
    PlainValidator,
    TypeAdapter,
    ValidationError,
)

from speciescatalog.species.models import EDITABLE_FIELDS, Kingdom
from speciescatalog.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

_URL_ADAPTER = TypeAdapter(AnyUrl)

# Largest value a SQLite INTEGER column can hold
MAX_POPULATION = 2**63 - 1

# Select tokens used by the endangered dropdown
ENDANGERED_CHOICES = {"T": True, "F": False, "D": None}


def _blank_to_none(value: Any) -> Any:  # noqa: ANN401
    """Collapse blank or whitespace-only strings to None, trim anything else."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _require_text(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        raise ValueError("Scientific name is required")
    return value


def _absolute_url(value: str | None) -> str | None:
    if value is None:
        return None
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid url") from None
    return value


def _reject_bool(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, bool):
        raise ValueError("Expected a whole number")
    return value


def _endangered_from_selection(value: Any) -> bool | None:  # noqa: ANN401
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip() in ("", *ENDANGERED_CHOICES):
        return ENDANGERED_CHOICES.get(value.strip())
    raise ValueError("Select true, false or leave unset")


ScientificName = Annotated[str, BeforeValidator(_require_text)]
OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]
ImageUrl = Annotated[str | None, BeforeValidator(_blank_to_none), AfterValidator(_absolute_url)]
Endangered = Annotated[bool | None, PlainValidator(_endangered_from_selection)]
TotalPopulation = Annotated[
    Annotated[int, Field(ge=1, le=MAX_POPULATION)] | None,
    BeforeValidator(_reject_bool),
    BeforeValidator(_blank_to_none),
]

FIELD_TYPES: dict[str, Any] = {
    "scientific_name": ScientificName,
    "common_name": OptionalText,
    "kingdom": Kingdom,
    "endangered": Endangered,
    "total_population": TotalPopulation,
    "image": ImageUrl,
    "description": OptionalText,
}


class SpeciesForm(BaseModel):
    """Normalized, validated species input ready to be persisted."""

    scientific_name: ScientificName
    common_name: OptionalText = None
    kingdom: Kingdom
    endangered: Endangered = None
    total_population: TotalPopulation = None
    image: ImageUrl = None
    description: OptionalText = None


@cache
def _field_adapter(field: str) -> TypeAdapter:
    return TypeAdapter(FIELD_TYPES[field])


def _first_message(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return "Invalid value"
    message = details[0]["msg"]
    return message.removeprefix("Value error, ")


def validate_field(field: str, value: Any) -> Result[Any]:  # noqa: ANN401
    """Validate and normalize a single field value.

    Args:
        field: One of the editable species fields
        value: Raw input as received from the form

    Returns:
        Ok with the normalized value, or Err with a field-scoped message

    Raises:
        KeyError: If ``field`` is not an editable species field
    """
    if field not in FIELD_TYPES:
        raise KeyError(field)

    try:
        return Ok(_field_adapter(field).validate_python(value))
    except ValidationError as e:
        return Err(_first_message(e))


def validate_record(raw: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    """Validate every editable field of a record.

    Missing fields are validated as None, so a missing scientific name or
    kingdom fails like an empty one.

    Returns:
        Tuple of (normalized values, field errors); errors is empty when the
        whole record is valid.
    """
    normalized: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for field in EDITABLE_FIELDS:
        result = validate_field(field, raw.get(field))
        if isinstance(result, Ok):
            normalized[field] = result.value
        else:
            errors[field] = result.message

    if errors:
        logger.debug("Species record failed validation: %s", errors)
    return normalized, errors


def endangered_token(value: Any) -> str:  # noqa: ANN401
    """Select token for a stored or raw endangered value."""
    if isinstance(value, str) and value.strip() in ENDANGERED_CHOICES:
        return value.strip()
    for token, choice in ENDANGERED_CHOICES.items():
        if value is choice:
            return token
    return "D"
