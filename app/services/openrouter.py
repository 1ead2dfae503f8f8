"""Integration helpers for the OpenRouter API."""

from __future__ import annotations

import logging

import httpx

from ..config import Settings
from ..errors import FetchError
from ..utils import parse_movie_names

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are MovieDeck, a movie recommendation system. You always respond with a "
    "single JSON object that matches the documented schema and never include "
    "commentary outside JSON."
)

SEARCH_REQUEST_TEMPLATE = """
Act as a movie recommendation system and suggest some movies for the query: {query}

Rules:
1. Suggest EXACTLY {count} real, released movies.
2. Write every title in {language_name}.
3. Order them from the best match to the weakest.

Respond strictly with JSON following this structure:
{{
  "movies": ["Title One", "Title Two"]
}}
"""


class OpenRouterClient:
    """Client responsible for talking to OpenRouter."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    async def suggest_movies(
        self,
        query: str,
        *,
        count: int | None = None,
        language_name: str = "English",
        model: str | None = None,
    ) -> list[str]:
        """Ask the configured model for movie titles matching ``query``."""

        resolved_key = self._settings.openrouter_api_key
        if not resolved_key:
            raise FetchError("OpenRouter API key is required for GPT search")
        resolved_count = count or self._settings.gpt_suggestion_count
        payload = {
            "model": model or self._settings.openrouter_model,
            "temperature": 0.7,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": SEARCH_REQUEST_TEMPLATE.format(
                        query=query,
                        count=resolved_count,
                        language_name=language_name,
                    ),
                },
            ],
        }
        headers = {
            "Authorization": f"Bearer {resolved_key}",
            "Content-Type": "application/json",
            "X-Title": self._settings.app_name,
        }

        try:
            response = await self._client.post(
                "/chat/completions", json=payload, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("OpenRouter request failed: %r", exc)
            raise FetchError(str(exc) or "Failed to reach the search model.") from exc
        if response.status_code >= 400:
            raise FetchError(
                f"HTTP error! status: {response.status_code} for GPT search",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError("Search model returned invalid JSON") from exc
        if not isinstance(data, dict):
            raise FetchError("Search model returned an unexpected payload")
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise FetchError("Model returned no choices")
        choice = choices[0]
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            raise FetchError("Model response missing message")
        content = message.get("content")
        if not isinstance(content, str):
            raise FetchError("Model response missing content")

        names = parse_movie_names(content, limit=resolved_count)
        logger.info("Model suggested %d titles for %r", len(names), query)
        return names
