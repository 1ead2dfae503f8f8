"""Profile directory behaviour against a temporary SQLite store."""

from __future__ import annotations

from typing import AsyncIterator

import pytest
from sqlalchemy.exc import OperationalError

from app.database import Database
from app.errors import FetchError, PersistenceError, ValidationError
from app.models import Profile, ProfileInput
from app.services.profiles import ProfileDirectory
from app.store import AppStore


@pytest.fixture
async def database(tmp_path) -> AsyncIterator[Database]:
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'profiles.db'}")
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


class _ExplodingSessionFactory:
    """Session factory that fails on use, or records that it was touched."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self

    async def __aenter__(self):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    async def __aexit__(self, *exc_info) -> bool:
        return False


@pytest.mark.anyio
async def test_list_profiles_without_user_skips_store() -> None:
    factory = _ExplodingSessionFactory()
    directory = ProfileDirectory(AppStore(), factory)  # type: ignore[arg-type]

    assert await directory.list_profiles("") == []
    assert await directory.list_profiles(None) == []
    assert factory.calls == 0


@pytest.mark.anyio
async def test_create_profile_with_blank_name_performs_no_write() -> None:
    factory = _ExplodingSessionFactory()
    directory = ProfileDirectory(AppStore(), factory)  # type: ignore[arg-type]

    with pytest.raises(ValidationError):
        await directory.create_profile("u1", ProfileInput(name=""))
    with pytest.raises(ValidationError):
        await directory.create_profile("u1", ProfileInput(name="   "))
    with pytest.raises(ValidationError):
        await directory.create_profile("", ProfileInput(name="Kids"))
    assert factory.calls == 0


@pytest.mark.anyio
async def test_store_failures_map_onto_error_taxonomy() -> None:
    directory = ProfileDirectory(AppStore(), _ExplodingSessionFactory())  # type: ignore[arg-type]

    with pytest.raises(FetchError):
        await directory.list_profiles("u1")
    with pytest.raises(PersistenceError):
        await directory.create_profile("u1", ProfileInput(name="Kids"))
    with pytest.raises(PersistenceError):
        await directory.update_profile("p1", ProfileInput(name="Updated"))
    with pytest.raises(PersistenceError):
        await directory.delete_profile("p1")


@pytest.mark.anyio
async def test_create_then_relist_round_trip(database: Database) -> None:
    store = AppStore()
    directory = ProfileDirectory(store, database.session_factory)

    assert await directory.sync_profiles("u1") == []

    created = await directory.create_profile("u1", ProfileInput(name="Kids"))

    assert created.id
    assert created.user_id == "u1"
    assert created.name == "Kids"
    assert created.avatar is None
    assert created.created_at is not None
    assert created.updated_at == created.created_at
    # Creating never patches the in-memory list; a re-sync is required.
    assert store.profiles == []

    profiles = await directory.sync_profiles("u1")

    assert [(profile.id, profile.name) for profile in profiles] == [(created.id, "Kids")]
    assert store.profiles == profiles


@pytest.mark.anyio
async def test_profiles_are_scoped_to_their_account(database: Database) -> None:
    directory = ProfileDirectory(AppStore(), database.session_factory)
    await directory.create_profile("u1", ProfileInput(name="Mine"))
    await directory.create_profile("u2", ProfileInput(name="Theirs", avatar="fox.png"))

    mine = await directory.list_profiles("u1")
    theirs = await directory.list_profiles("u2")

    assert [profile.name for profile in mine] == ["Mine"]
    assert [(profile.name, profile.avatar) for profile in theirs] == [("Theirs", "fox.png")]


@pytest.mark.anyio
async def test_update_profile_requires_relist(database: Database) -> None:
    store = AppStore()
    directory = ProfileDirectory(store, database.session_factory)
    created = await directory.create_profile("u1", ProfileInput(name="Original", avatar="cat.png"))
    await directory.sync_profiles("u1")

    result = await directory.update_profile(created.id, ProfileInput(name="Updated"))

    assert result is None
    assert store.profiles[0].name == "Original"
    profiles = await directory.sync_profiles("u1")
    assert profiles[0].name == "Updated"
    # Avatar untouched when the caller did not supply one.
    assert profiles[0].avatar == "cat.png"
    assert profiles[0].updated_at is not None and created.updated_at is not None
    assert profiles[0].updated_at >= created.updated_at


@pytest.mark.anyio
async def test_update_profile_can_clear_avatar(database: Database) -> None:
    directory = ProfileDirectory(AppStore(), database.session_factory)
    created = await directory.create_profile("u1", ProfileInput(name="Ann", avatar="cat.png"))

    await directory.update_profile(created.id, ProfileInput(name="Ann", avatar=None))

    (profile,) = await directory.list_profiles("u1")
    assert profile.avatar is None


@pytest.mark.anyio
async def test_update_profile_validation(database: Database) -> None:
    directory = ProfileDirectory(AppStore(), database.session_factory)

    with pytest.raises(ValidationError):
        await directory.update_profile("", ProfileInput(name="x"))
    with pytest.raises(ValidationError):
        await directory.update_profile("p1", ProfileInput(name=""))


@pytest.mark.anyio
async def test_update_unknown_profile_fails(database: Database) -> None:
    directory = ProfileDirectory(AppStore(), database.session_factory)

    with pytest.raises(PersistenceError):
        await directory.update_profile("missing", ProfileInput(name="Ghost"))


@pytest.mark.anyio
async def test_delete_profile_is_idempotent(database: Database) -> None:
    directory = ProfileDirectory(AppStore(), database.session_factory)
    created = await directory.create_profile("u1", ProfileInput(name="Temp"))

    await directory.delete_profile(created.id)
    await directory.delete_profile(created.id)

    assert await directory.list_profiles("u1") == []
    with pytest.raises(ValidationError):
        await directory.delete_profile("")


@pytest.mark.anyio
async def test_selection_does_not_check_persistence(database: Database) -> None:
    store = AppStore()
    directory = ProfileDirectory(store, database.session_factory)
    ghost = Profile(id="gone", userId="u1", name="Ghost")

    directory.select_profile(ghost)
    assert store.current_profile == ghost

    directory.clear_selection()
    assert store.current_profile is None


@pytest.mark.anyio
async def test_sync_without_user_empties_store(database: Database) -> None:
    store = AppStore()
    store.set_profiles([Profile(id="1", userId="u1", name="Stale")])
    directory = ProfileDirectory(store, database.session_factory)

    assert await directory.sync_profiles(None) == []
    assert store.profiles == []
