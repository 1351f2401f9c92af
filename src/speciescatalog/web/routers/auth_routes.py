"""Authentication routes: sign up, log in and log out."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starsessions import load_session
from starsessions.session import regenerate_session_id

from speciescatalog.config import SpeciesCatalogConfig
from speciescatalog.notifications.toasts import pop_session_toasts
from speciescatalog.profiles.models import Profile
from speciescatalog.utils.auth import SESSION_NAME_KEY, SESSION_PROFILE_KEY, AuthService
from speciescatalog.utils.result import Err
from speciescatalog.web.core.container import Container

logger = logging.getLogger(__name__)

router = APIRouter()


def safe_next_url(next_url: str | None) -> str:
    """Only relative paths are honoured to prevent open redirects."""
    if not next_url or not next_url.startswith("/") or next_url.startswith("//"):
        return "/species"
    return next_url


def _auth_context(
    request: Request,
    config: SpeciesCatalogConfig,
    page_name: str,
    error: str | None = None,
    username: str = "",
    display_name: str = "",
) -> dict[str, object]:
    return {
        "site_name": config.site_name,
        "page_name": page_name,
        "user": request.user,
        "toasts": pop_session_toasts(request.session),
        "error": error,
        "username": username,
        "display_name": display_name,
        "next_url": safe_next_url(request.query_params.get("next")),
    }


def _start_session(request: Request, profile: Profile) -> None:
    # Regenerate session ID to prevent session fixation attacks
    regenerate_session_id(request)
    request.session[SESSION_PROFILE_KEY] = str(profile.id)
    request.session[SESSION_NAME_KEY] = profile.display_name


@router.get("/login", response_class=HTMLResponse, name="login")
@inject
async def login_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Show login page."""
    return templates.TemplateResponse(
        request, "auth/login.html.j2", _auth_context(request, config, "Log in")
    )


@router.post("/login", response_model=None)
@inject
async def login(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    auth_service: Annotated[AuthService, Depends(Provide[Container.auth_service])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    username: str = Form(...),
    password: str = Form(...),
) -> HTMLResponse | RedirectResponse:
    """Verify credentials and start a session, or re-show the form with an error."""
    profile = await auth_service.authenticate(username, password)
    if profile is None:
        logger.warning("Failed login for username %r", username)
        context = _auth_context(
            request, config, "Log in", error="Invalid credentials", username=username
        )
        return templates.TemplateResponse(
            request, "auth/login.html.j2", context, status_code=401
        )

    _start_session(request, profile)
    return RedirectResponse(
        url=safe_next_url(request.query_params.get("next")), status_code=303
    )


@router.get("/signup", response_class=HTMLResponse)
@inject
async def signup_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Show sign-up page."""
    return templates.TemplateResponse(
        request, "auth/signup.html.j2", _auth_context(request, config, "Sign up")
    )


@router.post("/signup", response_model=None)
@inject
async def signup(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    auth_service: Annotated[AuthService, Depends(Provide[Container.auth_service])],
    config: Annotated[SpeciesCatalogConfig, Depends(Provide[Container.config])],
    username: str = Form(...),
    display_name: str = Form(...),
    password: str = Form(...),
) -> HTMLResponse | RedirectResponse:
    """Create a profile and log it in."""
    result = await auth_service.register(username, display_name, password)
    if isinstance(result, Err):
        context = _auth_context(
            request,
            config,
            "Sign up",
            error=result.message,
            username=username,
            display_name=display_name,
        )
        return templates.TemplateResponse(
            request, "auth/signup.html.j2", context, status_code=422
        )

    logger.info("Registered profile %s", result.value.username)
    _start_session(request, result.value)
    return RedirectResponse(
        url=safe_next_url(request.query_params.get("next")), status_code=303
    )


@router.get("/logout")
async def logout(request: Request) -> RedirectResponse:
    """Clear the session and go back to the login page."""
    await load_session(request)
    request.session.clear()
    return RedirectResponse(url="/login", status_code=303)


@router.get("/api/auth/status")
async def auth_status(request: Request) -> dict[str, bool | str | None]:
    """Check authentication status.

    Returns:
        Dict with authenticated boolean, display name and profile id
    """
    user = request.user
    if not user.is_authenticated:
        return {"authenticated": False, "display_name": None, "profile_id": None}
    return {
        "authenticated": True,
        "display_name": user.display_name,
        "profile_id": str(user.profile_id),
    }
