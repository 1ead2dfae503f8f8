"""Profile directory backed by the persistent ``profiles`` table.

Mutations never patch the in-memory list held by the store. After a create,
update or delete the caller runs :meth:`ProfileDirectory.sync_profiles` again
to pick up the change.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import ProfileRecord
from ..errors import FetchError, PersistenceError, ValidationError
from ..models import Profile, ProfileInput
from ..store import AppStore

logger = logging.getLogger(__name__)


def _new_profile_id() -> str:
    return secrets.token_hex(10)


class ProfileDirectory:
    """Create, list, update and delete viewing profiles for an account."""

    def __init__(
        self,
        store: AppStore,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self._store = store
        self._session_factory = session_factory

    async def list_profiles(self, user_id: str | None) -> list[Profile]:
        """Return every profile owned by ``user_id``."""

        if not user_id:
            logger.info("No user id supplied, returning no profiles")
            return []
        try:
            async with self._session_factory() as session:
                stmt = (
                    select(ProfileRecord)
                    .where(ProfileRecord.user_id == user_id)
                    .order_by(ProfileRecord.created_at, ProfileRecord.id)
                )
                result = await session.execute(stmt)
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            logger.warning("Fetching profiles for %s failed: %s", user_id, exc)
            raise FetchError("Failed to load profiles. Please try again.") from exc
        return [Profile.model_validate(record) for record in records]

    async def create_profile(self, user_id: str | None, data: ProfileInput) -> Profile:
        """Persist a new profile and return it with its generated id."""

        if not user_id or not data.name.strip():
            raise ValidationError("User ID and profile name are required.")

        now = datetime.utcnow()
        record = ProfileRecord(
            id=_new_profile_id(),
            user_id=user_id,
            name=data.name,
            avatar=data.avatar or None,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Creating profile for %s failed", user_id)
            raise PersistenceError("Failed to add profile. Please try again.") from exc
        return Profile.model_validate(record)

    async def update_profile(self, profile_id: str | None, data: ProfileInput) -> None:
        """Rename a profile (and change its avatar when one is supplied)."""

        if not profile_id or not data.name.strip():
            raise ValidationError("Profile ID and name are required for update.")

        values: dict[str, object] = {
            "name": data.name,
            "updated_at": datetime.utcnow(),
        }
        if data.avatar_supplied:
            values["avatar"] = data.avatar
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(ProfileRecord)
                    .where(ProfileRecord.id == profile_id)
                    .values(**values)
                )
                updated = result.rowcount
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Updating profile %s failed", profile_id)
            raise PersistenceError(
                "Failed to update profile. Please try again."
            ) from exc
        if updated == 0:
            raise PersistenceError(f"No profile with id {profile_id} to update")

    async def delete_profile(self, profile_id: str | None) -> None:
        """Remove a profile; deleting an id that no longer exists is a no-op."""

        if not profile_id:
            raise ValidationError("Profile ID is required for deletion.")
        try:
            async with self._session_factory() as session:
                await session.execute(
                    delete(ProfileRecord).where(ProfileRecord.id == profile_id)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Deleting profile %s failed", profile_id)
            raise PersistenceError(
                "Failed to delete profile. Please try again."
            ) from exc

    async def sync_profiles(self, user_id: str | None) -> list[Profile]:
        """Reload ``user_id``'s profiles and replace the store's list."""

        profiles = await self.list_profiles(user_id)
        self._store.set_profiles(profiles)
        return profiles

    def select_profile(self, profile: Profile) -> None:
        self._store.select_profile(profile)

    def clear_selection(self) -> None:
        self._store.clear_selection()
