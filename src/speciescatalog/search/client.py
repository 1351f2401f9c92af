"""Title search used to autofill species fields.

``SearchClient`` performs one HTTP GET against the page-search endpoint and
returns a tagged result. ``SearchSession`` is the per-dialog state machine
(Not Started -> Loading -> Resolved | Error) layered on top of it. Every
submission is tagged with a generation number and only the response for the
latest generation is applied, so a slow earlier response can never overwrite
a newer one.
"""

import logging
from enum import StrEnum
from typing import Any

import httpx
from pydantic import ValidationError

from speciescatalog.config.models import SearchConfig
from speciescatalog.notifications.toasts import Notifier, Severity
from speciescatalog.search.models import SearchResponse, SearchResult
from speciescatalog.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

MALFORMED_RESPONSE = "Search returned a malformed response."


class SearchStatus(StrEnum):
    """Lifecycle of a search panel."""

    NOT_STARTED = "Not Started"
    LOADING = "Loading"
    RESOLVED = "Resolved"
    ERROR = "Error"


class SearchClient:
    """HTTP client for the external page-title search API."""

    def __init__(
        self,
        endpoint: str,
        limit: int = 3,
        timeout_seconds: float = 10.0,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the search client.

        Args:
            endpoint: Full URL of the search endpoint
            limit: Default number of results to request
            timeout_seconds: Overall timeout applied to each request
            user_agent: User-Agent header sent with each request
            transport: Optional httpx transport (used to stub the API in tests)
        """
        self.endpoint = endpoint
        self.limit = limit
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.transport = transport

    @classmethod
    def from_config(
        cls, config: SearchConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> "SearchClient":
        return cls(
            endpoint=config.endpoint,
            limit=config.limit,
            timeout_seconds=config.timeout_seconds,
            user_agent=config.user_agent,
            transport=transport,
        )

    async def search(self, query: str, limit: int | None = None) -> Result[list[SearchResult]]:
        """Search page titles.

        Empty queries are still sent; the API decides what they match.

        Args:
            query: Free text; surrounding whitespace is trimmed
            limit: Number of results to request (defaults to the client limit)

        Returns:
            Ok with the result list, or Err describing the network, status or
            payload failure
        """
        params = {"q": query.strip(), "limit": limit or self.limit}
        headers = {"User-Agent": self.user_agent} if self.user_agent else {}

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self.transport,
                headers=headers,
            ) as client:
                response = await client.get(self.endpoint, params=params)
        except httpx.TimeoutException:
            logger.warning("Search for %r timed out after %ss", params["q"], self.timeout_seconds)
            return Err(f"Search timed out after {self.timeout_seconds:g} seconds.")
        except httpx.HTTPError as e:
            logger.warning("Search for %r failed: %s", params["q"], e)
            return Err(f"Search request failed: {e}")

        if not response.is_success:
            logger.warning("Search for %r returned HTTP %d", params["q"], response.status_code)
            return Err(f"Search failed with HTTP status {response.status_code}.")

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Search for %r returned a non-JSON body", params["q"])
            return Err(MALFORMED_RESPONSE)

        try:
            parsed = SearchResponse.model_validate(payload)
        except ValidationError as e:
            logger.warning("Search for %r returned an unexpected payload: %s", params["q"], e)
            return Err(MALFORMED_RESPONSE)

        return Ok(parsed.pages)


class SearchSession:
    """Search state owned by one dialog."""

    def __init__(self, client: SearchClient, notifier: Notifier, limit: int | None = None):
        self.client = client
        self.notifier = notifier
        self.limit = limit or client.limit
        self.status = SearchStatus.NOT_STARTED
        self.query = ""
        self.results: list[SearchResult] = []
        self.error: str | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        """Sequence number of the latest submission."""
        return self._generation

    def begin(self, text: str) -> int:
        """Move to Loading for a new submission and return its generation."""
        self._generation += 1
        self.query = text.strip()
        self.status = SearchStatus.LOADING
        self.error = None
        return self._generation

    def complete(self, generation: int, result: Result[list[SearchResult]]) -> bool:
        """Apply the response for ``generation``.

        Returns:
            True if the response was applied, False if a newer submission
            superseded it
        """
        if generation != self._generation:
            logger.debug(
                "Discarding stale search response (generation %d, latest %d)",
                generation,
                self._generation,
            )
            return False

        if isinstance(result, Ok):
            self.results = list(result.value)
            self.status = SearchStatus.RESOLVED
            if not self.results:
                self.notifier.notify(
                    "No results found.",
                    f"No results for {self.query}.",
                    Severity.DESTRUCTIVE,
                )
        else:
            self.results = []
            self.error = result.message
            self.status = SearchStatus.ERROR
        return True

    async def submit(self, text: str) -> SearchStatus:
        """Run one search submission to completion."""
        generation = self.begin(text)
        result = await self.client.search(self.query, self.limit)
        self.complete(generation, result)
        return self.status

    def select(self, index: int) -> tuple[str | None, str | None]:
        """Pick a resolved result for autofill.

        Returns:
            Tuple of (description, absolute thumbnail URL); the caller decides
            how to apply them

        Raises:
            IndexError: If there is no resolved result at ``index``
        """
        if self.status != SearchStatus.RESOLVED or not 0 <= index < len(self.results):
            raise IndexError(f"No search result at position {index}")
        result = self.results[index]
        thumbnail_url = result.thumbnail.absolute_url if result.thumbnail else None
        return result.description, thumbnail_url

    def snapshot(self) -> dict[str, Any]:
        """Serializable view of the panel for templates and the JSON API."""
        return {
            "status": self.status.value,
            "query": self.query,
            "results": [
                {
                    **result.model_dump(),
                    "thumbnail_url": result.thumbnail.absolute_url if result.thumbnail else None,
                }
                for result in self.results
            ],
            "error": self.error,
        }
