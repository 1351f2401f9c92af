import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from dependency_injector import providers
from starlette.testclient import TestClient

from speciescatalog.config import ConfigManager, SpeciesCatalogConfig
from speciescatalog.database.core import DatabaseService
from speciescatalog.notifications.toasts import ToastQueue
from speciescatalog.profiles.models import Profile
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.search.client import SearchClient
from speciescatalog.species.models import Kingdom, Species
from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.system.path_resolver import PathResolver
from speciescatalog.utils.auth import pwd_context
from speciescatalog.utils.result import Ok
from speciescatalog.web.core.container import Container
from speciescatalog.web.core.factory import create_app

SEARCH_ENDPOINT = "https://search.test/w/rest.php/v1/search/page"
TEST_PASSWORD = "correct-horse-battery"


def _wolf_fields(**overrides: Any) -> dict[str, Any]:
    """Normalized field values for a gray wolf record."""
    fields: dict[str, Any] = {
        "scientific_name": "Canis lupus",
        "common_name": "Gray wolf",
        "kingdom": Kingdom.ANIMALIA,
        "endangered": False,
        "total_population": 250000,
        "image": "https://upload.wikimedia.org/wikipedia/commons/wolf.jpg",
        "description": "Large canine native to Eurasia and North America.",
    }
    fields.update(overrides)
    return fields


def _wolf_form(**overrides: Any) -> dict[str, str]:
    """The gray wolf record as the browser would post it."""
    form = {
        "scientific_name": "Canis lupus",
        "common_name": "Gray wolf",
        "kingdom": "Animalia",
        "endangered": "F",
        "total_population": "250000",
        "image": "https://upload.wikimedia.org/wikipedia/commons/wolf.jpg",
        "description": "Large canine native to Eurasia and North America.",
    }
    form.update(overrides)
    return form


def _search_page(page_id: int = 1, title: str = "Gray wolf", **overrides: Any) -> dict[str, Any]:
    """One page entry shaped like the title search API returns it."""
    page: dict[str, Any] = {
        "id": page_id,
        "key": title.replace(" ", "_"),
        "title": title,
        "excerpt": f"<span>{title}</span>",
        "matched_title": None,
        "description": "Species of canine",
        "thumbnail": {
            "mimetype": "image/jpeg",
            "size": None,
            "width": 60,
            "height": 40,
            "duration": None,
            "url": "//upload.wikimedia.org/wikipedia/commons/thumb/wolf.jpg",
        },
    }
    page.update(overrides)
    return page


class SearchStub:
    """Callable httpx handler standing in for the title search API.

    Tests change ``payload``/``status_code`` to shape the next response and
    inspect ``requests`` to see what was sent.
    """

    def __init__(self) -> None:
        self.payload: Any = {"pages": [_search_page()]}
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


@pytest.fixture
def path_resolver(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> PathResolver:
    """Provide a PathResolver whose writable paths live under tmp_path.

    Templates and static files still resolve inside the package.
    """
    monkeypatch.delenv("SPECIESCATALOG_CONFIG", raising=False)
    monkeypatch.delenv("SPECIESCATALOG_SESSION_SECRET", raising=False)
    resolver = PathResolver()
    resolver.data_dir = tmp_path / "data"
    return resolver


@pytest.fixture
def test_config(path_resolver: PathResolver) -> SpeciesCatalogConfig:
    """Configuration loaded (and created with defaults) under the temp data dir."""
    return ConfigManager(path_resolver).load()


@pytest.fixture
async def database(path_resolver: PathResolver):
    """Initialized temp database, disposed after the test."""
    service = DatabaseService(path_resolver.get_database_path())
    await service.initialize()
    yield service
    await service.dispose()


@pytest.fixture
def species_repository(database: DatabaseService) -> SpeciesRepository:
    return SpeciesRepository(database)


@pytest.fixture
def profile_repository(database: DatabaseService) -> ProfileRepository:
    return ProfileRepository(database)


@pytest.fixture
async def author(profile_repository: ProfileRepository) -> Profile:
    """The profile that authors the seeded species."""
    result = await profile_repository.create(
        "darwin", "Charles Darwin", pwd_context.hash(TEST_PASSWORD)
    )
    assert isinstance(result, Ok)
    return result.value


@pytest.fixture
async def other_profile(profile_repository: ProfileRepository) -> Profile:
    """A signed-in user who did not author the seeded species."""
    result = await profile_repository.create(
        "wallace", "Alfred Russel Wallace", pwd_context.hash(TEST_PASSWORD)
    )
    assert isinstance(result, Ok)
    return result.value


@pytest.fixture
async def wolf(species_repository: SpeciesRepository, author: Profile) -> Species:
    """A stored gray wolf record authored by ``author``."""
    result = await species_repository.create(_wolf_fields(), author.id)
    assert isinstance(result, Ok)
    return result.value


@pytest.fixture
def toasts() -> ToastQueue:
    return ToastQueue()


@pytest.fixture
def search_stub() -> SearchStub:
    return SearchStub()


@pytest.fixture
def search_client(search_stub: SearchStub) -> SearchClient:
    """SearchClient wired to the stubbed search API."""
    return SearchClient(
        SEARCH_ENDPOINT,
        limit=3,
        timeout_seconds=1.0,
        transport=httpx.MockTransport(search_stub),
    )


@pytest.fixture
def app(path_resolver: PathResolver, test_config: SpeciesCatalogConfig, search_stub: SearchStub):
    """Create the FastAPI app with isolated paths and a stubbed search API.

    Container providers are overridden before the app is created so the
    database, config and search client all point at test doubles.
    """
    test_search_config = test_config.search.model_copy(update={"endpoint": SEARCH_ENDPOINT})
    Container.path_resolver.override(providers.Singleton(lambda: path_resolver))
    Container.config.override(providers.Singleton(lambda: test_config))
    Container.search_client.override(
        providers.Singleton(
            lambda: SearchClient.from_config(
                test_search_config, transport=httpx.MockTransport(search_stub)
            )
        )
    )

    app = create_app()

    yield app

    Container.path_resolver.reset_override()
    Container.config.reset_override()
    Container.search_client.reset_override()


@pytest.fixture
def client(app):
    """TestClient running the app lifespan (database created on startup)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def sign_up() -> Callable[..., uuid.UUID]:
    """Provide a function that registers and logs in a user on a TestClient.

    Returns:
        A callable returning the new profile id
    """

    def _sign_up(client: TestClient, username: str, display_name: str) -> uuid.UUID:
        client.cookies.clear()
        response = client.post(
            "/signup",
            data={"username": username, "display_name": display_name, "password": TEST_PASSWORD},
            follow_redirects=False,
        )
        assert response.status_code == 303
        status = client.get("/api/auth/status").json()
        assert status["authenticated"] is True
        return uuid.UUID(status["profile_id"])

    return _sign_up


@pytest.fixture
def authenticated_client(client: TestClient, sign_up) -> TestClient:
    """Client signed in as the author of species it creates."""
    sign_up(client, "darwin", "Charles Darwin")
    return client


@pytest.fixture
def create_species() -> Callable[..., int]:
    """Provide a function that adds a species through the form and returns its id."""

    def _create(client: TestClient, **overrides: str) -> int:
        response = client.post("/species/new", data=_wolf_form(**overrides), follow_redirects=False)
        assert response.status_code == 303, response.text
        return int(response.headers["location"].rsplit("/", 1)[-1])

    return _create


@pytest.fixture
def wolf_fields() -> Callable[..., dict[str, Any]]:
    """Normalized gray wolf field values, with optional overrides."""
    return _wolf_fields


@pytest.fixture
def wolf_form() -> Callable[..., dict[str, str]]:
    """Gray wolf form data as posted by the browser, with optional overrides."""
    return _wolf_form


@pytest.fixture
def search_page() -> Callable[..., dict[str, Any]]:
    """Builder for search API page entries."""
    return _search_page


@pytest.fixture
def test_password() -> str:
    """Password used by every profile the fixtures register."""
    return TEST_PASSWORD
