import asyncio

import pytest

from speciescatalog.notifications.toasts import Severity
from speciescatalog.species.edit_session import (
    BUSY_MESSAGE,
    CANCEL_PROMPT,
    EditMode,
    EditNotPermittedError,
    InvalidTransitionError,
    RecordEditSession,
)
from speciescatalog.utils.result import Err, Ok


class ScriptedConfirm:
    """Confirmation prompt that answers with a fixed choice and records prompts."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer


@pytest.fixture
def make_session(species_repository, toasts):
    """Build a RecordEditSession for the wolf record."""

    def _make(species, viewer_id, answer=True, refresh=None):
        return RecordEditSession(
            species,
            viewer_id,
            species_repository,
            toasts,
            ScriptedConfirm(answer),
            refresh=refresh,
        )

    return _make


class TestPermissions:
    """Test author-only controls."""

    async def test_author_can_modify(self, make_session, wolf, author):
        """Should show controls to the author."""
        assert make_session(wolf, author.id).can_modify is True

    async def test_other_viewer_cannot_modify(self, make_session, wolf, other_profile):
        """Should hide controls from anyone else."""
        session = make_session(wolf, other_profile.id)

        assert session.can_modify is False
        with pytest.raises(EditNotPermittedError):
            session.start_edit()

    async def test_anonymous_cannot_modify(self, make_session, wolf):
        """Should hide controls when nobody is signed in."""
        session = make_session(wolf, None)

        assert session.can_modify is False
        with pytest.raises(EditNotPermittedError):
            session.start_edit()

    async def test_other_viewer_cannot_delete(self, make_session, wolf, other_profile):
        """Should refuse deletes from non-authors before prompting."""
        session = make_session(wolf, other_profile.id)

        with pytest.raises(EditNotPermittedError):
            await session.delete()
        assert session.confirm.prompts == []


class TestTransitions:
    """Test Viewing/Editing transitions."""

    async def test_starts_viewing_with_persisted_values(self, make_session, wolf, author):
        """Should mirror the stored record while viewing."""
        session = make_session(wolf, author.id)

        assert session.mode == EditMode.VIEWING
        assert session.values["scientific_name"] == "Canis lupus"
        assert session.can_submit is False

    async def test_start_edit_twice(self, make_session, wolf, author):
        """Should refuse entering Editing from Editing."""
        session = make_session(wolf, author.id)
        session.start_edit()

        with pytest.raises(InvalidTransitionError):
            session.start_edit()

    async def test_set_field_requires_editing(self, make_session, wolf, author):
        """Should refuse field changes while viewing."""
        with pytest.raises(InvalidTransitionError):
            make_session(wolf, author.id).set_field("common_name", "Wolf")

    async def test_field_errors_block_submission(self, make_session, wolf, author):
        """Should track invalid fields and disable submit until fixed."""
        session = make_session(wolf, author.id)
        session.start_edit()

        result = session.set_field("total_population", "0")

        assert isinstance(result, Err)
        assert "total_population" in session.errors
        assert session.values["total_population"] == "0"
        assert session.can_submit is False

        session.set_field("total_population", "12")
        assert session.errors == {}
        assert session.can_submit is True

    async def test_update_fields_ignores_non_editable(self, make_session, wolf, author):
        """Should only apply editable fields."""
        session = make_session(wolf, author.id)
        session.start_edit()

        errors = session.update_fields({"image": "nope", "author": "someone else"})

        assert errors == {"image": "Invalid url"}
        assert "author" not in session.values


class TestCancel:
    """Test cancelling an edit."""

    async def test_accepted_cancel_restores_persisted_values(self, make_session, wolf, author):
        """Should revert every field and return to Viewing."""
        session = make_session(wolf, author.id, answer=True)
        session.start_edit()
        session.set_field("scientific_name", "Canis latrans")
        session.set_field("image", "nope")

        assert session.cancel() is True
        assert session.mode == EditMode.VIEWING
        assert session.values["scientific_name"] == "Canis lupus"
        assert session.errors == {}
        assert session.confirm.prompts == [CANCEL_PROMPT]

    async def test_declined_cancel_keeps_editing(self, make_session, wolf, author):
        """Should keep the unsaved input when the user declines."""
        session = make_session(wolf, author.id, answer=False)
        session.start_edit()
        session.set_field("scientific_name", "Canis latrans")

        assert session.cancel() is False
        assert session.mode == EditMode.EDITING
        assert session.values["scientific_name"] == "Canis latrans"


class TestConfirmEdit:
    """Test saving an edit."""

    async def test_saves_and_notifies(
        self, make_session, wolf, author, species_repository, toasts, mocker
    ):
        """Should persist the full record, refresh and toast the new name."""
        refresh = mocker.AsyncMock()
        session = make_session(wolf, author.id, refresh=refresh)
        session.start_edit()
        session.update_fields({"scientific_name": " Canis latrans ", "common_name": ""})

        result = await session.confirm_edit()

        assert isinstance(result, Ok)
        assert session.mode == EditMode.VIEWING
        stored = (await species_repository.get(wolf.id)).value
        assert stored.scientific_name == "Canis latrans"
        assert stored.common_name is None
        assert session.persisted["scientific_name"] == "Canis latrans"
        refresh.assert_awaited_once()
        queued = toasts.drain()
        assert [(t.title, t.description) for t in queued] == [
            ("Changes saved!", "Saved your changes to Canis latrans.")
        ]

    async def test_invalid_fields_stay_editing(
        self, make_session, wolf, author, species_repository, mocker
    ):
        """Should not write anything while a field is invalid."""
        update = mocker.spy(species_repository, "update")
        session = make_session(wolf, author.id)
        session.start_edit()
        session.set_field("scientific_name", "   ")

        result = await session.confirm_edit()

        assert result == Err("Some fields are invalid.")
        assert session.mode == EditMode.EDITING
        assert session.errors == {"scientific_name": "Scientific name is required"}
        update.assert_not_called()

    async def test_persistence_failure_keeps_state(
        self, make_session, wolf, author, species_repository, toasts, mocker
    ):
        """Should toast the failure and keep the prior persisted values."""
        failing_update = mocker.AsyncMock(return_value=Err("database is locked"))
        mocker.patch.object(species_repository, "update", new=failing_update)
        session = make_session(wolf, author.id)
        session.start_edit()
        session.set_field("common_name", "Timber wolf")

        result = await session.confirm_edit()

        assert result == Err("database is locked")
        assert session.mode == EditMode.EDITING
        assert session.persisted["common_name"] == "Gray wolf"
        queued = toasts.drain()
        assert queued[0].title == "Something went wrong."
        assert queued[0].severity == Severity.DESTRUCTIVE

    async def test_oversized_population_is_a_field_error(
        self, make_session, wolf, author, species_repository, mocker
    ):
        """Should keep an unstorable population in Editing as a field error."""
        update = mocker.spy(species_repository, "update")
        session = make_session(wolf, author.id)
        session.start_edit()
        session.set_field("total_population", str(10**20))

        result = await session.confirm_edit()

        assert result == Err("Some fields are invalid.")
        assert session.mode == EditMode.EDITING
        assert "total_population" in session.errors
        update.assert_not_called()
        assert session.persisted["total_population"] == 250000

    async def test_requires_editing(self, make_session, wolf, author):
        """Should refuse to save from Viewing."""
        with pytest.raises(InvalidTransitionError):
            await make_session(wolf, author.id).confirm_edit()


class TestDelete:
    """Test deleting a record."""

    async def test_accepted_delete(
        self, make_session, wolf, author, species_repository, toasts, mocker
    ):
        """Should delete, close the dialog and toast the deleted name."""
        refresh = mocker.AsyncMock()
        session = make_session(wolf, author.id, answer=True, refresh=refresh)

        assert await session.delete() is True

        assert session.closed is True
        assert session.confirm.prompts == ["Delete the Canis lupus species?"]
        assert isinstance(await species_repository.get(wolf.id), Err)
        refresh.assert_awaited_once()
        queued = toasts.drain()
        assert [(t.title, t.description) for t in queued] == [
            ("Species deleted.", "Deleted the Canis lupus species.")
        ]

    async def test_declined_delete_makes_no_request(
        self, make_session, wolf, author, species_repository, toasts, mocker
    ):
        """Should not call the repository when the user declines."""
        delete = mocker.spy(species_repository, "delete")
        session = make_session(wolf, author.id, answer=False)

        assert await session.delete() is False

        delete.assert_not_called()
        assert session.closed is False
        assert toasts.drain() == []

    async def test_closed_dialog_cannot_edit(self, make_session, wolf, author):
        """Should refuse to start editing a deleted record."""
        session = make_session(wolf, author.id)
        await session.delete()

        with pytest.raises(InvalidTransitionError):
            session.start_edit()


class TestMutualExclusion:
    """Test that save and delete never overlap."""

    async def test_delete_refused_while_saving(
        self, make_session, wolf, author, species_repository, toasts, mocker
    ):
        """Should refuse a delete while a save is in flight."""
        release = asyncio.Event()
        real_update = species_repository.update

        async def slow_update(species_id, data):
            await release.wait()
            return await real_update(species_id, data)

        mocker.patch.object(species_repository, "update", new=slow_update)
        delete = mocker.spy(species_repository, "delete")
        session = make_session(wolf, author.id)
        session.start_edit()

        saving = asyncio.create_task(session.confirm_edit())
        await asyncio.sleep(0)
        assert session.busy is True

        assert await session.delete() is False
        assert await session.confirm_edit() == Err(BUSY_MESSAGE)
        delete.assert_not_called()
        assert session.confirm.prompts == []

        release.set()
        assert isinstance(await saving, Ok)
        assert session.busy is False
        titles = [t.title for t in toasts.drain()]
        assert titles == ["Something went wrong.", "Changes saved!"]
