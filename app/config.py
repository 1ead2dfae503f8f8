"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .categories import MOVIE_CATEGORIES, CategoryDefinition


DEFAULT_CATEGORY_KEYS: tuple[str, ...] = tuple(
    definition.key for definition in MOVIE_CATEGORIES
)


def _normalise_category_key(entry: str) -> str:
    """Map ``top_rated``/``Top Rated``/``topRated`` onto ``topRated``."""

    parts = [
        part
        for part in entry.replace("-", "_").replace(" ", "_").split("_")
        if part
    ]
    if not parts:
        return ""
    if len(parts) == 1:
        lowered = parts[0].lower()
        for key in DEFAULT_CATEGORY_KEYS:
            if key.lower() == lowered:
                return key
        return parts[0]
    return parts[0].lower() + "".join(part.capitalize() for part in parts[1:])


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="MovieDeck", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    tmdb_access_token: str | None = Field(default=None, alias="TMDB_ACCESS_TOKEN")
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_language: str = Field(default="en-US", alias="TMDB_LANGUAGE")

    browse_categories: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_CATEGORY_KEYS,
        alias="BROWSE_CATEGORIES",
    )

    openrouter_api_key: str | None = Field(
        default=None, alias="OPENROUTER_API_KEY"
    )
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash-lite", alias="OPENROUTER_MODEL"
    )
    openrouter_api_url: HttpUrl = Field(
        default="https://openrouter.ai/api/v1", alias="OPENROUTER_API_URL"
    )
    gpt_suggestion_count: int = Field(
        default=5, alias="GPT_SUGGESTION_COUNT", ge=1, le=10
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./moviedeck.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("browse_categories", mode="before")
    @classmethod
    def _parse_browse_categories(cls, value: object) -> tuple[str, ...]:
        """Normalise category selections from environment values."""

        if value is None:
            return DEFAULT_CATEGORY_KEYS
        if isinstance(value, str):
            raw_values = [part.strip() for part in value.split(",")]
        elif isinstance(value, Iterable):
            raw_values = [str(part).strip() for part in value]
        else:
            raise TypeError(
                "BROWSE_CATEGORIES must be a string or iterable of strings"
            )

        cleaned: list[str] = []
        for entry in raw_values:
            if not entry:
                continue
            key = _normalise_category_key(entry)
            if not key:
                continue
            if key not in DEFAULT_CATEGORY_KEYS:
                raise ValueError("Unknown movie categories configured")
            if key not in cleaned:
                cleaned.append(key)
        if not cleaned:
            return DEFAULT_CATEGORY_KEYS
        return tuple(cleaned)

    @property
    def category_definitions(self) -> tuple[CategoryDefinition, ...]:
        """Return ordered category definitions for the selected keys."""

        definition_map = {definition.key: definition for definition in MOVIE_CATEGORIES}
        return tuple(definition_map[key] for key in self.browse_categories)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
