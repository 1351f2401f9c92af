"""Database models for the species domain."""

import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import Column, Enum, String, Text
from sqlmodel import Field, SQLModel


class Kingdom(StrEnum):
    """The fixed set of kingdoms a species can belong to."""

    ANIMALIA = "Animalia"
    PLANTAE = "Plantae"
    FUNGI = "Fungi"
    PROTISTA = "Protista"
    ARCHAEA = "Archaea"
    BACTERIA = "Bacteria"


# Fields a species form can change; id and author are never edited.
EDITABLE_FIELDS: tuple[str, ...] = (
    "scientific_name",
    "common_name",
    "kingdom",
    "endangered",
    "total_population",
    "image",
    "description",
)


class Species(SQLModel, table=True):
    """Represents one species record in the catalog."""

    __tablename__: str = "species"  # type: ignore[assignment]

    id: int | None = Field(default=None, primary_key=True)
    scientific_name: str = Field(sa_column=Column(String(200), nullable=False, index=True))
    common_name: str | None = Field(default=None, sa_column=Column(String(200)))
    kingdom: Kingdom = Field(
        sa_column=Column(
            Enum(Kingdom, name="kingdom", values_callable=lambda e: [m.value for m in e]),
            nullable=False,
        )
    )
    endangered: bool | None = None
    total_population: int | None = None
    image: str | None = Field(default=None, sa_column=Column(Text))
    description: str | None = Field(default=None, sa_column=Column(Text))
    author: uuid.UUID = Field(foreign_key="profiles.id", index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def editable_values(self) -> dict[str, Any]:
        """Return the user-editable fields as a plain mapping."""
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}
