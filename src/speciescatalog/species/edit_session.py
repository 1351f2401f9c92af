"""Edit workflow for a single species record.

A ``RecordEditSession`` is created per open dialog and owns the in-progress
field values for that record. It is either ``Viewing`` (values mirror the
persisted record) or ``Editing`` (values are the user's raw input, each
validated as it changes). Save and delete are mutually exclusive: while one
is in flight the other is refused.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

from speciescatalog.notifications.toasts import Notifier, Severity
from speciescatalog.species.models import EDITABLE_FIELDS, Species
from speciescatalog.species.repository import SpeciesRepository
from speciescatalog.species.schema import validate_field, validate_record
from speciescatalog.utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
Refresh = Callable[[], Awaitable[None]]

CANCEL_PROMPT = "Revert all unsaved changes?"
BUSY_MESSAGE = "Another change to this species is still in progress."


class EditMode(StrEnum):
    """Whether a dialog shows persisted values or editable input."""

    VIEWING = "viewing"
    EDITING = "editing"


class EditNotPermittedError(Exception):
    """Raised when someone other than the author tries to change a record."""


class InvalidTransitionError(Exception):
    """Raised when an operation is not allowed in the current edit mode."""


class RecordEditSession:
    """In-progress edits to one species record."""

    def __init__(
        self,
        species: Species,
        viewer_id: uuid.UUID | None,
        repository: SpeciesRepository,
        notifier: Notifier,
        confirm: Confirm,
        refresh: Refresh | None = None,
    ) -> None:
        """Initialize the session from the persisted record.

        Args:
            species: The persisted record being viewed
            viewer_id: Profile id of the current viewer, None when anonymous
            repository: Persistence for update and delete
            notifier: Receives success and failure toasts
            confirm: Interactive yes/no prompt used before cancel and delete
            refresh: Awaited after a successful mutation to re-fetch view data
        """
        self.species = species
        self.viewer_id = viewer_id
        self.repository = repository
        self.notifier = notifier
        self.confirm = confirm
        self.refresh = refresh

        self.mode = EditMode.VIEWING
        self.persisted: dict[str, Any] = species.editable_values()
        self.values: dict[str, Any] = dict(self.persisted)
        self.errors: dict[str, str] = {}
        self.closed = False
        self._lock = asyncio.Lock()

    @property
    def can_modify(self) -> bool:
        """Only the record's author sees edit and delete controls."""
        return self.viewer_id is not None and self.viewer_id == self.species.author

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def can_submit(self) -> bool:
        return self.mode == EditMode.EDITING and not self.errors and not self.busy

    def _require_author(self) -> None:
        if not self.can_modify:
            raise EditNotPermittedError(
                f"Only the author may change species {self.species.id}."
            )

    def _require_mode(self, mode: EditMode) -> None:
        if self.mode != mode:
            raise InvalidTransitionError(f"Species {self.species.id} is {self.mode.value}.")

    def start_edit(self) -> None:
        """Switch to Editing; only the author may do this."""
        self._require_author()
        if self.closed:
            raise InvalidTransitionError(f"The dialog for species {self.species.id} is closed.")
        self._require_mode(EditMode.VIEWING)
        self.mode = EditMode.EDITING

    def set_field(self, field: str, value: Any) -> Result[Any]:  # noqa: ANN401
        """Record raw input for one field and validate it immediately.

        The raw value is kept so the form shows what the user typed; the
        error, if any, is tracked per field and blocks submission.
        """
        self._require_mode(EditMode.EDITING)
        result = validate_field(field, value)
        self.values[field] = value
        if isinstance(result, Err):
            self.errors[field] = result.message
        else:
            self.errors.pop(field, None)
        return result

    def update_fields(self, raw: dict[str, Any]) -> dict[str, str]:
        """Apply several field changes; returns the current field errors."""
        for field, value in raw.items():
            if field in EDITABLE_FIELDS:
                self.set_field(field, value)
        return dict(self.errors)

    def cancel(self) -> bool:
        """Revert to the persisted values after interactive confirmation.

        Returns:
            True if the edit was cancelled, False if the user declined
        """
        self._require_mode(EditMode.EDITING)
        if not self.confirm(CANCEL_PROMPT):
            return False

        self.values = dict(self.persisted)
        self.errors = {}
        self.mode = EditMode.VIEWING
        return True

    async def confirm_edit(self) -> Result[Species]:
        """Normalize and save all fields as one full-record update.

        On success the session returns to Viewing with the stored values; on
        any failure it stays in Editing and the prior persisted state is kept.
        """
        self._require_author()
        self._require_mode(EditMode.EDITING)
        if self.busy:
            return Err(BUSY_MESSAGE)

        async with self._lock:
            normalized, errors = validate_record(self.values)
            if errors:
                self.errors = errors
                return Err("Some fields are invalid.")

            result = await self.repository.update(self.species.id, normalized)
            if isinstance(result, Err):
                self.notifier.notify("Something went wrong.", result.message, Severity.DESTRUCTIVE)
                return result

            self.species = result.value
            self.persisted = self.species.editable_values()
            self.values = dict(self.persisted)
            self.errors = {}
            self.mode = EditMode.VIEWING

        if self.refresh is not None:
            await self.refresh()

        self.notifier.notify(
            "Changes saved!", f"Saved your changes to {self.species.scientific_name}."
        )
        return Ok(self.species)

    async def delete(self) -> bool:
        """Delete the record after interactive confirmation.

        Returns:
            True if the record was deleted; False if the user declined, another
            change was in flight, or the delete failed
        """
        self._require_author()
        if self.busy:
            self.notifier.notify("Something went wrong.", BUSY_MESSAGE, Severity.DESTRUCTIVE)
            return False

        name = self.species.scientific_name
        if not self.confirm(f"Delete the {name} species?"):
            return False

        async with self._lock:
            result = await self.repository.delete(self.species.id)
            if isinstance(result, Err):
                self.notifier.notify("Something went wrong.", result.message, Severity.DESTRUCTIVE)
                return False
            self.closed = True

        if self.refresh is not None:
            await self.refresh()

        self.notifier.notify("Species deleted.", f"Deleted the {name} species.")
        return True
