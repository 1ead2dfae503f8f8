"""Reacts to sign-in state transitions reported by the identity provider."""

from __future__ import annotations

import logging

from ..models import Identity
from ..store import AppStore
from .profiles import ProfileDirectory

logger = logging.getLogger(__name__)

SIGNED_OUT_PATH = "/"
SIGNED_IN_PATH = "/profiles/select"


class SessionService:
    """Applies ``(user present, identity)`` events to the store."""

    def __init__(self, store: AppStore, profiles: ProfileDirectory):
        self._store = store
        self._profiles = profiles

    async def handle_auth_change(self, identity: Identity | None) -> str:
        """Apply an identity event and return the path of the next view."""

        if identity is None:
            self._reset()
            logger.info("User signed out")
            return SIGNED_OUT_PATH

        # Listing failures leave the previous session state untouched.
        profiles = await self._profiles.list_profiles(identity.uid)
        self._store.set_user(identity)
        self._store.set_profiles(profiles)
        logger.info("User %s signed in with %d profiles", identity.uid, len(profiles))
        return SIGNED_IN_PATH

    def _reset(self) -> None:
        self._store.clear_user()
        self._store.set_profiles([])
        self._store.clear_selection()
        self._store.clear_gpt()
