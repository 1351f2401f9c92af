"""The species detail dialog: one modal view/edit surface for a record.

Composes author resolution, the autofill search panel and the edit session.
Author lookup runs as a background task started on ``open`` so it never
delays showing or editing the record.
"""

import asyncio
import logging
import uuid
from typing import Any

from speciescatalog.notifications.toasts import Notifier
from speciescatalog.profiles.repository import ProfileRepository
from speciescatalog.search.client import SearchClient, SearchSession
from speciescatalog.species.authors import AuthorResolver
from speciescatalog.species.edit_session import (
    Confirm,
    EditMode,
    InvalidTransitionError,
    RecordEditSession,
)
from speciescatalog.species.models import Kingdom, Species
from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.species.schema import ENDANGERED_CHOICES, endangered_token
from speciescatalog.utils.result import Ok

logger = logging.getLogger(__name__)


def decline(prompt: str) -> bool:
    """Confirmation callback that answers no to every prompt."""
    return False


class SpeciesDetailDialog:
    """State behind one open detail dialog.

    Each instance owns its own edit session, search panel and author list;
    nothing is shared between dialogs.
    """

    def __init__(
        self,
        species: Species,
        viewer_id: uuid.UUID | None,
        species_repository: SpeciesRepository,
        profile_repository: ProfileRepository,
        search_client: SearchClient,
        notifier: Notifier,
        confirm: Confirm = decline,
    ) -> None:
        self.species_repository = species_repository
        self.notifier = notifier
        self.author_resolver = AuthorResolver(profile_repository, notifier)
        self.search = SearchSession(search_client, notifier)
        self.session = RecordEditSession(
            species,
            viewer_id,
            species_repository,
            notifier,
            confirm,
            refresh=self.refresh,
        )
        self.authors: list[str] = []
        self._author_task: asyncio.Task[list[str]] | None = None

    @property
    def species(self) -> Species:
        return self.session.species

    @property
    def is_open(self) -> bool:
        return not self.session.closed

    def open(self) -> asyncio.Task[list[str]]:
        """Start resolving the author in the background and return the task."""
        if self._author_task is None:
            self._author_task = asyncio.create_task(self._load_authors())
        return self._author_task

    async def _load_authors(self) -> list[str]:
        self.authors = await self.author_resolver.resolve(self.species.author)
        return self.authors

    async def wait_for_authors(self) -> list[str]:
        """Await the author lookup started by ``open`` (starting it if needed)."""
        return await self.open()

    def close(self) -> None:
        """Close the dialog, abandoning any pending author lookup."""
        if self._author_task is not None and not self._author_task.done():
            self._author_task.cancel()
        self.session.closed = True

    async def refresh(self) -> None:
        """Re-fetch the record after a successful mutation."""
        if self.session.closed:
            return
        result = await self.species_repository.get(self.species.id)
        if isinstance(result, Ok):
            self.session.species = result.value
        else:
            logger.warning("Could not refresh species %s: %s", self.species.id, result.message)

    def apply_search_result(self, index: int) -> None:
        """Copy a selected search hit's description and image into the edit form.

        Raises:
            InvalidTransitionError: If the dialog is not in Editing mode
            IndexError: If there is no resolved result at ``index``
        """
        if self.session.mode != EditMode.EDITING:
            raise InvalidTransitionError("Start editing before applying a search result.")
        description, image = self.search.select(index)
        if description:
            self.session.set_field("description", description)
        if image:
            self.session.set_field("image", image)

    def render_context(self) -> dict[str, Any]:
        """Template context for the dialog."""
        session = self.session
        return {
            "species": self.species,
            "authors": self.authors,
            "mode": session.mode.value,
            "editing": session.mode == EditMode.EDITING,
            "values": session.values,
            "errors": session.errors,
            "can_submit": session.can_submit,
            "show_controls": session.can_modify,
            "kingdoms": [kingdom.value for kingdom in Kingdom],
            "endangered_choices": list(ENDANGERED_CHOICES),
            "endangered_token": endangered_token(session.values.get("endangered")),
            "search": self.search.snapshot(),
        }
