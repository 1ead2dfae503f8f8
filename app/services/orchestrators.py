"""Guarded triggers that decide when catalog data is fetched."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Sequence

from ..categories import MOVIE_CATEGORIES, get_category
from ..errors import FetchError
from ..models import TrailerVideo
from ..store import AppStore
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)


def select_trailer(videos: Sequence[TrailerVideo]) -> TrailerVideo | None:
    """Pick the first ``Trailer`` entry, else the first video, else nothing."""

    for video in videos:
        if video.type == "Trailer":
            return video
    return videos[0] if videos else None


class CategoryFetchOrchestrator:
    """Fetches movie categories into the store when they are not cached yet."""

    def __init__(self, store: AppStore, tmdb_client: TMDBClient):
        self._store = store
        self._tmdb = tmdb_client
        self._in_flight: dict[str, asyncio.Task[None]] = {}

    def is_fetching(self, key: str) -> bool:
        task = self._in_flight.get(key)
        return task is not None and not task.done()

    async def ensure_fetched(self, key: str, *, revalidate: bool = False) -> None:
        """Fetch ``key`` unless the store already holds data for it.

        Any held data, including an empty list, counts as cached. Passing
        ``revalidate=True`` refetches regardless. A caller arriving while a
        request for the same category is outstanding waits on that request
        instead of starting another one.
        """

        definition = get_category(key)
        existing = self._in_flight.get(key)
        if existing is not None and not existing.done():
            await asyncio.shield(existing)
            return
        if self._store.category(key).data is not None and not revalidate:
            logger.debug("Serving %s movies from the store", definition.label)
            return

        # start() and the in-flight marker land before the first await.
        self._store.start(key)
        task = asyncio.create_task(self._fetch(key))
        self._in_flight[key] = task
        task.add_done_callback(lambda _: self._forget(key, task))
        await asyncio.shield(task)

    async def ensure_all(
        self, keys: Iterable[str] | None = None, *, revalidate: bool = False
    ) -> None:
        """Run the orchestrators for several categories concurrently."""

        selected = list(keys) if keys is not None else [
            definition.key for definition in MOVIE_CATEGORIES
        ]
        await asyncio.gather(
            *(self.ensure_fetched(key, revalidate=revalidate) for key in selected)
        )

    async def _fetch(self, key: str) -> None:
        definition = get_category(key)
        logger.info("Fetching %s movies", definition.label)
        try:
            movies = await self._tmdb.fetch_category(definition)
        except FetchError as exc:
            message = str(exc) or f"Failed to fetch {definition.label} movies."
            logger.warning("Fetching %s movies failed: %s", definition.label, message)
            self._store.failure(key, message)
            return
        self._store.success(key, movies)

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        if self._in_flight.get(key) is task:
            self._in_flight.pop(key, None)


class TrailerFetchOrchestrator:
    """Resolves a movie's trailer through a per-movie cache in the store."""

    def __init__(self, store: AppStore, tmdb_client: TMDBClient):
        self._store = store
        self._tmdb = tmdb_client
        self._in_flight: dict[str, asyncio.Task[TrailerVideo | None]] = {}

    async def fetch_trailer(
        self, movie_id: int | str | None, *, revalidate: bool = False
    ) -> TrailerVideo | None:
        """Make ``movie_id``'s trailer the current one and return it."""

        if not movie_id:
            return None
        cache_key = str(movie_id)

        existing = self._in_flight.get(cache_key)
        if existing is not None and not existing.done():
            return await asyncio.shield(existing)
        if self._store.has_trailer(movie_id) and not revalidate:
            cached = self._store.cached_trailer(movie_id)
            self._store.set_trailer(movie_id, cached)
            return cached

        task = asyncio.create_task(self._fetch(movie_id))
        self._in_flight[cache_key] = task
        task.add_done_callback(lambda _: self._forget(cache_key, task))
        return await asyncio.shield(task)

    async def _fetch(self, movie_id: int | str) -> TrailerVideo | None:
        try:
            videos = await self._tmdb.fetch_videos(movie_id)
        except FetchError as exc:
            logger.warning("Fetching trailer for movie %s failed: %s", movie_id, exc)
            self._store.drop_trailer(movie_id)
            return None
        trailer = select_trailer(videos)
        self._store.set_trailer(movie_id, trailer)
        return trailer

    def _forget(self, cache_key: str, task: asyncio.Task[TrailerVideo | None]) -> None:
        if self._in_flight.get(cache_key) is task:
            self._in_flight.pop(cache_key, None)
