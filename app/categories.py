"""Fixed movie category definitions served by the catalog API."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryDefinition:
    """Describes one of the movie listing buckets shown on the browse view."""

    key: str
    endpoint: str
    title: str
    label: str

    @property
    def path(self) -> str:
        return f"/movie/{self.endpoint}"


MOVIE_CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition(
        key="nowPlaying",
        endpoint="now_playing",
        title="Now Playing",
        label="now playing",
    ),
    CategoryDefinition(
        key="popular",
        endpoint="popular",
        title="Popular Movies",
        label="popular",
    ),
    CategoryDefinition(
        key="topRated",
        endpoint="top_rated",
        title="Top Rated Movies",
        label="top rated",
    ),
    CategoryDefinition(
        key="upcoming",
        endpoint="upcoming",
        title="Upcoming Movies",
        label="upcoming",
    ),
)

CATEGORY_MAP: dict[str, CategoryDefinition] = {
    definition.key: definition for definition in MOVIE_CATEGORIES
}


def get_category(key: str) -> CategoryDefinition:
    """Return the definition for ``key`` or raise ``KeyError``."""

    try:
        return CATEGORY_MAP[key]
    except KeyError:
        raise KeyError(f"Unknown movie category {key!r}") from None
