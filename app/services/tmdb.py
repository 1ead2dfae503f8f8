"""Read-only client for The Movie Database (TMDB) catalog API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..categories import CategoryDefinition
from ..config import Settings
from ..errors import FetchError
from ..models import Movie, TrailerVideo

logger = logging.getLogger(__name__)


class TMDBClient:
    """Client issuing catalog requests with the configured bearer token."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_access_token:
            raise ValueError(
                "TMDB access token is required when initialising TMDBClient"
            )
        self._settings = settings
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "Authorization": f"Bearer {self._settings.tmdb_access_token}",
        }

    async def fetch_category(self, category: CategoryDefinition) -> list[Movie]:
        """Return the first page of movies for ``category``."""

        payload = await self._get_json(
            category.path,
            params={"page": 1},
            subject=f"{category.label} movies",
        )
        return self._parse_results(payload, Movie, subject=f"{category.label} movies")

    async def fetch_videos(self, movie_id: int | str) -> list[TrailerVideo]:
        """Return the video list attached to ``movie_id``."""

        subject = f"movie {movie_id} videos"
        payload = await self._get_json(
            f"/movie/{movie_id}/videos",
            params={"language": self._settings.tmdb_language},
            subject=subject,
        )
        return self._parse_results(payload, TrailerVideo, subject=subject)

    async def search_movies(self, title: str) -> list[Movie]:
        """Return catalog matches for a free-text title."""

        subject = f"search results for {title!r}"
        payload = await self._get_json(
            "/search/movie",
            params={
                "query": title,
                "include_adult": "false",
                "language": self._settings.tmdb_language,
                "page": 1,
            },
            subject=subject,
        )
        return self._parse_results(payload, Movie, subject=subject)

    async def _get_json(
        self, endpoint: str, *, params: dict[str, Any], subject: str
    ) -> dict[str, Any]:
        try:
            response = await self._client.get(
                endpoint, params=params, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            logger.warning("TMDB request for %s failed: %r", subject, exc)
            raise FetchError(str(exc) or f"Failed to fetch {subject}.") from exc

        if not response.is_success:
            raise FetchError(
                f"HTTP error! status: {response.status_code} for {subject}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(str(exc) or f"Failed to fetch {subject}.") from exc
        if not isinstance(data, dict):
            raise FetchError(f"Unexpected payload received for {subject}")
        return data

    @staticmethod
    def _parse_results(
        payload: dict[str, Any], model: type[Movie] | type[TrailerVideo], *, subject: str
    ) -> list[Any]:
        results = payload.get("results")
        if not isinstance(results, list):
            raise FetchError(f"Missing results array for {subject}")
        try:
            return [model.model_validate(entry) for entry in results]
        except PydanticValidationError as exc:
            raise FetchError(f"Malformed {subject}: {exc.error_count()} invalid entries") from exc
