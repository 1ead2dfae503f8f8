"""Natural-language movie search combining the model and the catalog."""

from __future__ import annotations

import asyncio
import logging

from ..errors import ValidationError
from ..models import Movie
from ..store import SUPPORTED_LANGUAGES, AppStore
from .openrouter import OpenRouterClient
from .tmdb import TMDBClient

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = dict(SUPPORTED_LANGUAGES)


class GptSearchService:
    """Turns a free-text query into catalog matches stored for presentation."""

    def __init__(
        self,
        store: AppStore,
        openrouter_client: OpenRouterClient,
        tmdb_client: TMDBClient,
    ):
        self._store = store
        self._ai = openrouter_client
        self._tmdb = tmdb_client

    def toggle_view(self) -> bool:
        return self._store.toggle_gpt_search()

    def change_language(self, language: str) -> None:
        if language not in LANGUAGE_NAMES:
            raise ValidationError(f"Unsupported language {language!r}")
        self._store.change_language(language)  # type: ignore[arg-type]

    async def search(self, query: str) -> tuple[list[str], list[list[Movie]]]:
        """Suggest titles for ``query`` and look each one up in the catalog.

        Model and catalog failures propagate as ``FetchError``; the store is
        only written once every lookup succeeded.
        """

        cleaned = (query or "").strip()
        if not cleaned:
            raise ValidationError("Search query cannot be empty.")

        names = await self._ai.suggest_movies(
            cleaned, language_name=LANGUAGE_NAMES[self._store.language]
        )
        results = await asyncio.gather(
            *(self._tmdb.search_movies(name) for name in names)
        )
        movie_results = [list(matches) for matches in results]
        self._store.set_gpt_results(names, movie_results)
        logger.info(
            "GPT search for %r matched %d of %d titles",
            cleaned,
            sum(1 for matches in movie_results if matches),
            len(names),
        )
        return names, movie_results
