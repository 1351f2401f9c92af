"""Row-level access to the species table.

Every call returns an ``Ok``/``Err`` result; database errors are logged here
and surfaced to callers as their message.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError

from speciescatalog.database.core import DatabaseService
from speciescatalog.species.models import EDITABLE_FIELDS, Species
from speciescatalog.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def _not_found(species_id: int) -> Err:
    return Err(f"Species {species_id} not found.")


class SpeciesRepository:
    """Select, create, update and delete species records by primary key."""

    def __init__(self, database_service: DatabaseService) -> None:
        self.database_service = database_service

    async def list_species(self, query: str | None = None) -> Result[list[Species]]:
        """List species, optionally filtered by a name fragment.

        Args:
            query: Case-insensitive fragment matched against scientific and common names

        Returns:
            Ok with species ordered by scientific name, or Err
        """
        stmt = select(Species)
        if query and query.strip():
            pattern = f"%{query.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Species.scientific_name).like(pattern),
                    func.lower(Species.common_name).like(pattern),
                )
            )
        stmt = stmt.order_by(Species.scientific_name)

        async with self.database_service.get_async_db() as session:
            try:
                result = await session.execute(stmt)
                return Ok(list(result.scalars()))
            except SQLAlchemyError as e:
                logger.warning("Error listing species: %s", e)
                return Err(str(e))

    async def get(self, species_id: int) -> Result[Species]:
        """Fetch one species by id."""
        async with self.database_service.get_async_db() as session:
            try:
                species = await session.get(Species, species_id)
            except SQLAlchemyError as e:
                logger.warning("Error retrieving species %s: %s", species_id, e)
                return Err(str(e))
        if species is None:
            return _not_found(species_id)
        return Ok(species)

    async def create(self, data: Mapping[str, Any], author: uuid.UUID) -> Result[Species]:
        """Insert a species authored by ``author`` from normalized field values."""
        species = Species(
            **{field: data.get(field) for field in EDITABLE_FIELDS},
            author=author,
        )
        async with self.database_service.get_async_db() as session:
            try:
                session.add(species)
                await session.commit()
                await session.refresh(species)
            except (SQLAlchemyError, OverflowError) as e:
                await session.rollback()
                logger.exception("Error creating species %r", data.get("scientific_name"))
                return Err(str(e))
        logger.info("Created species %s (%s)", species.id, species.scientific_name)
        return Ok(species)

    async def update(self, species_id: int, data: Mapping[str, Any]) -> Result[Species]:
        """Replace every editable field of a species and return the stored row."""
        async with self.database_service.get_async_db() as session:
            try:
                species = await session.get(Species, species_id)
                if species is None:
                    return _not_found(species_id)
                for field in EDITABLE_FIELDS:
                    setattr(species, field, data.get(field))
                session.add(species)
                await session.commit()
                await session.refresh(species)
            except (SQLAlchemyError, OverflowError) as e:
                await session.rollback()
                logger.exception("Error updating species %s", species_id)
                return Err(str(e))
        logger.info("Updated species %s (%s)", species.id, species.scientific_name)
        return Ok(species)

    async def delete(self, species_id: int) -> Result[None]:
        """Delete a species by id."""
        async with self.database_service.get_async_db() as session:
            try:
                species = await session.get(Species, species_id)
                if species is None:
                    return _not_found(species_id)
                await session.delete(species)
                await session.commit()
            except (SQLAlchemyError, OverflowError) as e:
                await session.rollback()
                logger.exception("Error deleting species %s", species_id)
                return Err(str(e))
        logger.info("Deleted species %s", species_id)
        return Ok(None)
