import uuid

import pytest
from sqlalchemy.exc import OperationalError

from speciescatalog.species.models import Kingdom
from speciescatalog.utils.result import Err, Ok


class TestSpeciesRepository:
    """Test SpeciesRepository against a temp SQLite database."""

    async def test_create_assigns_id_and_author(self, species_repository, author, wolf_fields):
        """Should store the record with a generated id and the given author."""
        result = await species_repository.create(wolf_fields(), author.id)

        assert isinstance(result, Ok)
        assert result.value.id is not None
        assert result.value.author == author.id
        assert result.value.kingdom == Kingdom.ANIMALIA

    async def test_get_missing_species(self, species_repository):
        """Should return an Err naming the missing id."""
        assert await species_repository.get(999) == Err("Species 999 not found.")

    async def test_update_replaces_all_fields(self, species_repository, wolf, wolf_fields):
        """Should write the full record and return the stored row."""
        result = await species_repository.update(
            wolf.id, wolf_fields(common_name=None, endangered=True, total_population=None)
        )

        assert isinstance(result, Ok)
        stored = (await species_repository.get(wolf.id)).value
        assert stored.common_name is None
        assert stored.endangered is True
        assert stored.total_population is None
        assert stored.author == wolf.author

    async def test_update_missing_species(self, species_repository, wolf_fields):
        """Should not create rows for unknown ids."""
        assert await species_repository.update(42, wolf_fields()) == Err("Species 42 not found.")

    async def test_unstorable_integers_become_err(self, species_repository, wolf, wolf_fields):
        """Should return Err instead of raising when SQLite cannot hold a value."""
        created = await species_repository.create(wolf_fields(total_population=10**20), wolf.author)
        updated = await species_repository.update(wolf.id, wolf_fields(total_population=10**20))

        assert isinstance(created, Err)
        assert isinstance(updated, Err)
        assert (await species_repository.get(wolf.id)).value.total_population == 250000

    async def test_delete_removes_row(self, species_repository, wolf):
        """Should delete the record so it can no longer be fetched."""
        assert await species_repository.delete(wolf.id) == Ok(None)
        assert isinstance(await species_repository.get(wolf.id), Err)

    async def test_delete_missing_species(self, species_repository):
        """Should report a missing record."""
        assert isinstance(await species_repository.delete(7), Err)

    async def test_list_filters_case_insensitively(
        self, species_repository, author, wolf_fields
    ):
        """Should match scientific or common names and order by scientific name."""
        await species_repository.create(wolf_fields(), author.id)
        await species_repository.create(
            wolf_fields(
                scientific_name="Acer saccharum",
                common_name="Sugar maple",
                kingdom=Kingdom.PLANTAE,
            ),
            author.id,
        )
        await species_repository.create(
            wolf_fields(scientific_name="Vulpes vulpes", common_name="Red fox"), author.id
        )

        everything = await species_repository.list_species()
        by_common = await species_repository.list_species("MAPLE")
        by_scientific = await species_repository.list_species("  vulpes ")

        assert [s.scientific_name for s in everything.value] == [
            "Acer saccharum",
            "Canis lupus",
            "Vulpes vulpes",
        ]
        assert [s.scientific_name for s in by_common.value] == ["Acer saccharum"]
        assert [s.scientific_name for s in by_scientific.value] == ["Vulpes vulpes"]

    async def test_database_errors_become_err(self, species_repository, mocker):
        """Should turn SQLAlchemy errors into an Err instead of raising."""
        session = mocker.AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        context = mocker.MagicMock()
        context.__aenter__ = mocker.AsyncMock(return_value=session)
        context.__aexit__ = mocker.AsyncMock(return_value=False)
        mocker.patch.object(
            species_repository.database_service, "get_async_db", return_value=context
        )

        result = await species_repository.list_species()

        assert isinstance(result, Err)
        assert "disk I/O error" in result.message


class TestProfileRepository:
    """Test ProfileRepository lookups and creation."""

    async def test_select_display_names(self, profile_repository, author):
        """Should return the author's display name."""
        result = await profile_repository.select_display_names(author.id)

        assert result == Ok(["Charles Darwin"])

    async def test_select_display_names_unknown_id(self, profile_repository):
        """Should return an empty list for unknown profiles."""
        assert await profile_repository.select_display_names(uuid.uuid4()) == Ok([])

    async def test_duplicate_username_is_err(self, profile_repository, author):
        """Should refuse a second profile with the same username."""
        result = await profile_repository.create("darwin", "Another Darwin", "hash")

        assert result == Err("Username 'darwin' is already taken.")

    async def test_get_by_username(self, profile_repository, author):
        """Should find existing users and return None for unknown ones."""
        found = await profile_repository.get_by_username("darwin")
        missing = await profile_repository.get_by_username("nobody")

        assert found.value.id == author.id
        assert missing == Ok(None)

    @pytest.mark.parametrize("count", [0, 2])
    async def test_list_profiles(self, profile_repository, count):
        """Should list every profile ordered by username."""
        for index in range(count):
            await profile_repository.create(f"user{index}", f"User {index}", "hash")

        result = await profile_repository.list_profiles()

        assert [p.username for p in result.value] == [f"user{i}" for i in range(count)]
