"""Identity transition handling tests."""

from __future__ import annotations

import pytest

from app.errors import FetchError
from app.models import Identity, Movie, Profile
from app.services.profiles import ProfileDirectory
from app.services.session import SessionService
from app.store import AppStore
from app.utils import validate_credentials


class RecordingProfileDirectory(ProfileDirectory):
    """Profile directory stub returning canned profiles."""

    def __init__(self, store: AppStore, profiles: list[Profile]):
        super().__init__(store, session_factory=None)  # type: ignore[arg-type]
        self._profiles = profiles
        self.listed_for: list[str | None] = []

    async def list_profiles(self, user_id: str | None) -> list[Profile]:  # type: ignore[override]
        self.listed_for.append(user_id)
        return [profile for profile in self._profiles if profile.user_id == user_id]


@pytest.mark.anyio
async def test_sign_in_stores_identity_and_syncs_profiles() -> None:
    store = AppStore()
    directory = RecordingProfileDirectory(
        store, [Profile(id="p1", userId="u1", name="Kids")]
    )
    session = SessionService(store, directory)

    path = await session.handle_auth_change(
        Identity(uid="u1", email="ann@example.com", displayName="Ann", photoURL="https://x/y.png")
    )

    assert path == "/profiles/select"
    assert store.user is not None and store.user.photo_url == "https://x/y.png"
    assert directory.listed_for == ["u1"]
    assert [profile.name for profile in store.profiles] == ["Kids"]


@pytest.mark.anyio
async def test_sign_out_resets_account_state() -> None:
    store = AppStore()
    directory = RecordingProfileDirectory(store, [Profile(id="p1", userId="u1", name="Kids")])
    session = SessionService(store, directory)
    await session.handle_auth_change(Identity(uid="u1"))
    store.select_profile(store.profiles[0])
    store.toggle_gpt_search()
    store.set_gpt_results(["Heat"], [[Movie(id=1, title="Heat")]])

    path = await session.handle_auth_change(None)

    assert path == "/"
    assert store.user is None
    assert store.profiles == []
    assert store.current_profile is None
    assert store.gpt.show_gpt_search is False
    assert store.gpt.movie_names is None


class FailingProfileDirectory(ProfileDirectory):
    def __init__(self, store: AppStore):
        super().__init__(store, session_factory=None)  # type: ignore[arg-type]

    async def list_profiles(self, user_id: str | None) -> list[Profile]:  # type: ignore[override]
        raise FetchError("Failed to load profiles. Please try again.")


@pytest.mark.anyio
async def test_failed_profile_listing_keeps_user_signed_out() -> None:
    store = AppStore()
    session = SessionService(store, FailingProfileDirectory(store))

    with pytest.raises(FetchError):
        await session.handle_auth_change(Identity(uid="u1"))

    assert store.user is None
    assert store.profiles == []


def test_validate_credentials_messages() -> None:
    assert validate_credentials("not-an-email", "Passw0rdX") == "Email ID is not valid"
    assert validate_credentials("ann@example.com", "short") == "Password ID is not valid"
    assert validate_credentials("ann@example.com", "alllowercase1") == "Password ID is not valid"
    assert validate_credentials("ann@example.com", "Passw0rdX") is None
