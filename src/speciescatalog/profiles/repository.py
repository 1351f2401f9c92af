"""Row-level access to the profiles table."""

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from speciescatalog.database.core import DatabaseService
from speciescatalog.profiles.models import Profile
from speciescatalog.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Reads and creates user profiles."""

    def __init__(self, database_service: DatabaseService) -> None:
        self.database_service = database_service

    async def select_display_names(self, profile_id: uuid.UUID) -> Result[list[str]]:
        """Look up the display name(s) for a profile id.

        Returns:
            Ok with zero or more names, or Err with the database error message
        """
        async with self.database_service.get_async_db() as session:
            try:
                stmt = select(Profile.display_name).where(Profile.id == profile_id)
                result = await session.execute(stmt)
                return Ok([name for name in result.scalars() if name is not None])
            except SQLAlchemyError as e:
                logger.warning("Error looking up display name for %s: %s", profile_id, e)
                return Err(str(e))

    async def get_by_username(self, username: str) -> Result[Profile | None]:
        """Fetch a profile by username; Ok(None) when no such user exists."""
        async with self.database_service.get_async_db() as session:
            try:
                stmt = select(Profile).where(Profile.username == username)
                result = await session.execute(stmt)
                return Ok(result.scalars().first())
            except SQLAlchemyError as e:
                logger.warning("Error retrieving profile %r: %s", username, e)
                return Err(str(e))

    async def list_profiles(self) -> Result[Sequence[Profile]]:
        """List all profiles ordered by username."""
        async with self.database_service.get_async_db() as session:
            try:
                result = await session.execute(select(Profile).order_by(Profile.username))
                return Ok(list(result.scalars()))
            except SQLAlchemyError as e:
                logger.warning("Error listing profiles: %s", e)
                return Err(str(e))

    async def create(self, username: str, display_name: str, password_hash: str) -> Result[Profile]:
        """Insert a new profile.

        Returns:
            Ok with the stored profile, or Err when the username is taken or
            the insert fails
        """
        profile = Profile(username=username, display_name=display_name, password_hash=password_hash)
        async with self.database_service.get_async_db() as session:
            try:
                session.add(profile)
                await session.commit()
                await session.refresh(profile)
            except IntegrityError:
                await session.rollback()
                return Err(f"Username {username!r} is already taken.")
            except SQLAlchemyError as e:
                await session.rollback()
                logger.exception("Error creating profile %r", username)
                return Err(str(e))
        logger.info("Created profile %s for %s", profile.id, username)
        return Ok(profile)
