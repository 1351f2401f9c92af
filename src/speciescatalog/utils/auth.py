"""Authentication utilities for the species catalog.

Provides session-based authentication using Starlette's authentication
system on top of starsessions. The session stores the profile id of the
signed-in user; that id is the viewing identity compared against a species'
author.
"""

import uuid
from collections.abc import Awaitable, Callable
from functools import wraps
from urllib.parse import urlencode

from fastapi import HTTPException, Request, status
from passlib.context import CryptContext
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    SimpleUser,
)
from starlette.requests import HTTPConnection
from starlette.responses import RedirectResponse
from starsessions import load_session

from speciescatalog.profiles.models import Profile
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.utils.result import Err, Ok, Result

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

SESSION_PROFILE_KEY = "profile_id"
SESSION_NAME_KEY = "display_name"


class CatalogUser(SimpleUser):
    """Authenticated user carrying the profile id from the session."""

    def __init__(self, profile_id: uuid.UUID, display_name: str) -> None:
        super().__init__(display_name)
        self.profile_id = profile_id


def require_login_relative(
    redirect_path: str = "/login",
) -> Callable[[Callable[..., Awaitable[object]]], Callable[..., Awaitable[object]]]:
    """Create authentication decorator that uses relative URLs for redirects.

    Unlike Starlette's @requires which generates absolute URLs, this decorator
    uses relative paths to avoid issues with proxies and URL parsing.

    Args:
        redirect_path: Relative path to redirect to if not authenticated

    Returns:
        Decorator function that wraps route handlers
    """

    def decorator(
        func: Callable[..., Awaitable[object]],
    ) -> Callable[..., Awaitable[object]]:
        @wraps(func)
        async def wrapper(request: HTTPConnection, *args: object, **kwargs: object) -> object:
            if "authenticated" not in request.auth.scopes:
                next_qparam = urlencode({"next": str(request.url.path)})
                if request.url.query:
                    next_qparam = urlencode({"next": f"{request.url.path}?{request.url.query}"})

                return RedirectResponse(url=f"{redirect_path}?{next_qparam}", status_code=303)

            return await func(request, *args, **kwargs)

        return wrapper

    return decorator


# Usage: @require_login decorator on HTML view routes
require_login = require_login_relative()


def current_profile_id(request: Request) -> uuid.UUID:
    """FastAPI dependency for JSON routes: the signed-in profile id or 401."""
    user = request.user
    if not user.is_authenticated or not isinstance(user, CatalogUser):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user.profile_id


def viewer_id(request: HTTPConnection) -> uuid.UUID | None:
    """Profile id of the current viewer, or None when anonymous."""
    user = request.user
    if isinstance(user, CatalogUser):
        return user.profile_id
    return None


class AuthService:
    """Registers users and verifies their credentials."""

    def __init__(self, profiles: ProfileRepository) -> None:
        self.profiles = profiles

    async def register(self, username: str, display_name: str, password: str) -> Result[Profile]:
        """Create a profile with a hashed password.

        Returns:
            Ok with the new profile, or Err when input is incomplete or the
            username is already taken
        """
        username = username.strip()
        display_name = display_name.strip()
        if not username or not display_name or not password:
            return Err("Username, display name and password are required.")
        return await self.profiles.create(username, display_name, pwd_context.hash(password))

    async def authenticate(self, username: str, password: str) -> Profile | None:
        """Return the profile when the credentials match, None otherwise."""
        result = await self.profiles.get_by_username(username.strip())
        if not isinstance(result, Ok) or result.value is None:
            return None
        profile = result.value
        if not self.verify_password(password, profile.password_hash):
            return None
        return profile

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify password against hash.

        Args:
            password: Plain text password to verify
            password_hash: Argon2 hash to verify against

        Returns:
            True if password matches, False otherwise
        """
        return pwd_context.verify(password, password_hash)


class SessionAuthBackend(AuthenticationBackend):
    """Session-based authentication backend for Starlette.

    Checks for a profile id in the session and returns appropriate credentials.
    """

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, CatalogUser] | None:
        """Authenticate request based on session data.

        Called by AuthenticationMiddleware on every request. Explicitly loads
        session from starsessions middleware before accessing it.
        """
        await load_session(conn)

        raw_profile_id = conn.session.get(SESSION_PROFILE_KEY)
        if not raw_profile_id:
            return None

        try:
            profile_id = uuid.UUID(raw_profile_id)
        except ValueError:
            return None

        display_name = conn.session.get(SESSION_NAME_KEY) or ""
        return AuthCredentials(["authenticated"]), CatalogUser(profile_id, display_name)
