"""Process-wide application state shared by the orchestrators and routes.

The store performs no I/O. Every mutation goes through one of its transition
methods so that each change is a single synchronous step on the event loop.
One ``AppStore`` is built in the application lifespan and handed to the
services that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Sequence

from .categories import CATEGORY_MAP, MOVIE_CATEGORIES
from .models import Identity, Movie, Profile, TrailerVideo

SUPPORTED_LANGUAGES: tuple[tuple[str, str], ...] = (
    ("en", "English"),
    ("hindi", "Hindi"),
    ("telugu", "Telugu"),
)
LanguageCode = Literal["en", "hindi", "telugu"]


@dataclass
class CategoryState:
    """Fetch lifecycle for one movie category."""

    data: list[Movie] | None = None
    is_loading: bool = False
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "data": (
                [movie.model_dump(mode="json") for movie in self.data]
                if self.data is not None
                else None
            ),
            "isLoading": self.is_loading,
            "error": self.error,
        }


@dataclass
class GptState:
    """Natural-language search view state."""

    show_gpt_search: bool = False
    movie_names: list[str] | None = None
    movie_results: list[list[Movie]] | None = None


@dataclass
class AppStore:
    categories: dict[str, CategoryState] = field(
        default_factory=lambda: {
            definition.key: CategoryState() for definition in MOVIE_CATEGORIES
        }
    )
    trailer_video: TrailerVideo | None = None
    trailers: dict[str, TrailerVideo | None] = field(default_factory=dict)
    user: Identity | None = None
    profiles: list[Profile] = field(default_factory=list)
    current_profile: Profile | None = None
    gpt: GptState = field(default_factory=GptState)
    language: LanguageCode = "en"

    # Category transitions -------------------------------------------------

    def category(self, key: str) -> CategoryState:
        if key not in CATEGORY_MAP:
            raise KeyError(f"Unknown movie category {key!r}")
        return self.categories[key]

    def start(self, key: str) -> None:
        state = self.category(key)
        state.is_loading = True
        state.error = None

    def success(self, key: str, movies: Sequence[Movie]) -> None:
        # Also clears a stale error left behind by an earlier failure.
        state = self.category(key)
        state.is_loading = False
        state.data = list(movies)
        state.error = None

    def failure(self, key: str, message: str) -> None:
        state = self.category(key)
        state.is_loading = False
        state.error = message

    # Trailer slot ---------------------------------------------------------

    def has_trailer(self, movie_id: int | str) -> bool:
        return str(movie_id) in self.trailers

    def cached_trailer(self, movie_id: int | str) -> TrailerVideo | None:
        return self.trailers.get(str(movie_id))

    def set_trailer(self, movie_id: int | str, video: TrailerVideo | None) -> None:
        """Cache ``video`` for ``movie_id`` and make it the current trailer."""

        self.trailers[str(movie_id)] = video
        self.trailer_video = video

    def drop_trailer(self, movie_id: int | str) -> None:
        """Forget ``movie_id``'s trailer and clear the current slot."""

        self.trailers.pop(str(movie_id), None)
        self.trailer_video = None

    # User / profiles ------------------------------------------------------

    def set_user(self, identity: Identity) -> None:
        self.user = identity

    def clear_user(self) -> None:
        self.user = None

    def set_profiles(self, profiles: Sequence[Profile]) -> None:
        self.profiles = list(profiles)

    def select_profile(self, profile: Profile) -> None:
        self.current_profile = profile

    def clear_selection(self) -> None:
        self.current_profile = None

    # GPT search -----------------------------------------------------------

    def toggle_gpt_search(self) -> bool:
        self.gpt.show_gpt_search = not self.gpt.show_gpt_search
        return self.gpt.show_gpt_search

    def set_gpt_results(
        self, movie_names: Sequence[str], movie_results: Sequence[Sequence[Movie]]
    ) -> None:
        self.gpt.movie_names = list(movie_names)
        self.gpt.movie_results = [list(results) for results in movie_results]

    def clear_gpt(self) -> None:
        self.gpt = GptState()

    def change_language(self, language: LanguageCode) -> None:
        self.language = language

    def snapshot(self) -> dict[str, Any]:
        """Return a JSON-friendly view of the whole store."""

        return {
            "movies": {
                **{
                    key: state.to_payload()
                    for key, state in self.categories.items()
                },
                "trailerVideo": (
                    self.trailer_video.model_dump(mode="json")
                    if self.trailer_video
                    else None
                ),
            },
            "user": (
                self.user.model_dump(mode="json", by_alias=True) if self.user else None
            ),
            "profile": {
                "profiles": [profile.to_payload() for profile in self.profiles],
                "currentProfile": (
                    self.current_profile.to_payload() if self.current_profile else None
                ),
            },
            "gpt": {
                "showGptSearch": self.gpt.show_gpt_search,
                "movieNames": self.gpt.movie_names,
                "movieResults": (
                    [
                        [movie.model_dump(mode="json") for movie in results]
                        for results in self.gpt.movie_results
                    ]
                    if self.gpt.movie_results is not None
                    else None
                ),
            },
            "config": {"lang": self.language},
        }
