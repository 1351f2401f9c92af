"""Dependency injection container for the species catalog application."""

from dependency_injector import containers, providers
from fastapi.templating import Jinja2Templates
from jinja2 import StrictUndefined

from speciescatalog.database.core import DatabaseService
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.search.client import SearchClient
from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.system.path_resolver import PathResolver
from speciescatalog.utils.auth import AuthService
from speciescatalog.web.core.config import get_config


def create_jinja2_templates(resolver: PathResolver) -> Jinja2Templates:
    """Create Jinja2Templates with dynamic path from resolver and strict undefined handling.

    Undefined variables raise errors instead of rendering as empty strings,
    so missing template context fails loudly.
    """
    templates = Jinja2Templates(directory=str(resolver.get_templates_dir()))
    templates.env.undefined = StrictUndefined
    return templates


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Infrastructure and repositories are singletons; per-dialog state is never
    held here and is created per request by the routers.
    """

    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        get_config,
        path_resolver=path_resolver,
    )

    templates = providers.Singleton(
        create_jinja2_templates,
        resolver=path_resolver,
    )

    database_path = providers.Factory(
        lambda resolver: resolver.get_database_path(),
        resolver=path_resolver,
    )

    database = providers.Singleton(
        DatabaseService,
        db_path=database_path,
    )

    species_repository = providers.Singleton(
        SpeciesRepository,
        database_service=database,
    )

    profile_repository = providers.Singleton(
        ProfileRepository,
        database_service=database,
    )

    auth_service = providers.Singleton(
        AuthService,
        profiles=profile_repository,
    )

    search_client = providers.Singleton(
        lambda c: SearchClient.from_config(c.search),
        c=config,
    )
