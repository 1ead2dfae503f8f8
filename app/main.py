"""Entry point for the FastAPI-powered movie browsing service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, TypeVar

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .categories import CATEGORY_MAP
from .config import settings
from .database import Database
from .errors import FetchError, MovieDeckError, PersistenceError, ValidationError
from .models import Identity, Profile, ProfileInput
from .services.gpt_search import GptSearchService
from .services.openrouter import OpenRouterClient
from .services.orchestrators import CategoryFetchOrchestrator, TrailerFetchOrchestrator
from .services.profiles import ProfileDirectory
from .services.session import SIGNED_IN_PATH, SessionService
from .services.tmdb import TMDBClient
from .store import AppStore
from .utils import validate_credentials

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI

T = TypeVar("T")

BROWSE_PATH = "/browse"


class CredentialsPayload(BaseModel):
    email: str = ""
    password: str = ""


class LanguagePayload(BaseModel):
    lang: str


class SearchPayload(BaseModel):
    query: str = ""


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(15.0, connect=5.0),
        )
    )
    openrouter_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.openrouter_api_url),
            timeout=httpx.Timeout(60.0, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    store = AppStore()
    tmdb = TMDBClient(settings, tmdb_http_client)
    openrouter = OpenRouterClient(settings, openrouter_http_client)
    profiles = ProfileDirectory(store, database.session_factory)

    fastapi_app.state.store = store
    fastapi_app.state.database = database
    fastapi_app.state.category_orchestrator = CategoryFetchOrchestrator(store, tmdb)
    fastapi_app.state.trailer_orchestrator = TrailerFetchOrchestrator(store, tmdb)
    fastapi_app.state.profile_directory = profiles
    fastapi_app.state.session_service = SessionService(store, profiles)
    fastapi_app.state.gpt_search = GptSearchService(store, openrouter, tmdb)
    logger.info(
        "Services initialised for categories: %s",
        ", ".join(definition.title for definition in settings.category_definitions),
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie browsing with profiles, trailers and natural-language search",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def _get_service(fastapi_app: FastAPI, name: str, expected: type[T]) -> T:
    service = getattr(fastapi_app.state, name, None)
    if not isinstance(service, expected):
        raise RuntimeError(f"{expected.__name__} not initialised")
    return service


def _http_error(exc: MovieDeckError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, FetchError):
        return HTTPException(status_code=502, detail=str(exc))
    if isinstance(exc, PersistenceError):
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=500, detail="Unexpected error")


def register_routes(fastapi_app: FastAPI) -> None:
    def store() -> AppStore:
        return _get_service(fastapi_app, "store", AppStore)

    def profile_directory() -> ProfileDirectory:
        return _get_service(fastapi_app, "profile_directory", ProfileDirectory)

    def require_user() -> Identity:
        user = store().user
        if user is None:
            raise HTTPException(status_code=401, detail="Sign in required")
        return user

    def profiles_payload(view: str) -> dict[str, Any]:
        profile_state = store().snapshot()["profile"]
        return {"view": view, **profile_state}

    async def _profiles_view(view: str) -> dict[str, Any]:
        user = require_user()
        try:
            await profile_directory().sync_profiles(user.uid)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return profiles_payload(view)

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/")
    async def login_view() -> dict[str, Any]:
        user = store().user
        return {
            "view": "login",
            "user": user.model_dump(mode="json", by_alias=True) if user else None,
            "redirect": SIGNED_IN_PATH if user else None,
        }

    @fastapi_app.post("/session/validate")
    async def validate_session_input(payload: CredentialsPayload) -> dict[str, Any]:
        message = validate_credentials(payload.email, payload.password)
        return {"valid": message is None, "error": message}

    @fastapi_app.post("/session")
    async def sign_in(identity: Identity) -> dict[str, Any]:
        session = _get_service(fastapi_app, "session_service", SessionService)
        try:
            path = await session.handle_auth_change(identity)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        snapshot = store().snapshot()
        return {"path": path, "user": snapshot["user"], **snapshot["profile"]}

    @fastapi_app.delete("/session")
    async def sign_out() -> dict[str, Any]:
        session = _get_service(fastapi_app, "session_service", SessionService)
        path = await session.handle_auth_change(None)
        return {"path": path}

    @fastapi_app.get(BROWSE_PATH)
    async def browse_view() -> dict[str, Any]:
        require_user()
        categories = _get_service(
            fastapi_app, "category_orchestrator", CategoryFetchOrchestrator
        )
        trailers = _get_service(
            fastapi_app, "trailer_orchestrator", TrailerFetchOrchestrator
        )
        await categories.ensure_all(
            definition.key for definition in settings.category_definitions
        )

        now_playing = store().category("nowPlaying").data
        if now_playing:
            await trailers.fetch_trailer(now_playing[0].id)
        return {"view": "browse", **store().snapshot()}

    @fastapi_app.get("/categories/{category_key}")
    async def category_state(
        category_key: str, revalidate: bool = False
    ) -> dict[str, Any]:
        if category_key not in CATEGORY_MAP:
            raise HTTPException(status_code=404, detail="Unknown movie category")
        categories = _get_service(
            fastapi_app, "category_orchestrator", CategoryFetchOrchestrator
        )
        await categories.ensure_fetched(category_key, revalidate=revalidate)
        definition = CATEGORY_MAP[category_key]
        return {
            "key": definition.key,
            "title": definition.title,
            **store().category(category_key).to_payload(),
        }

    @fastapi_app.get("/movies/{movie_id}/trailer")
    async def movie_trailer(movie_id: int, revalidate: bool = False) -> dict[str, Any]:
        trailers = _get_service(
            fastapi_app, "trailer_orchestrator", TrailerFetchOrchestrator
        )
        trailer = await trailers.fetch_trailer(movie_id, revalidate=revalidate)
        return {
            "movieId": movie_id,
            "trailerVideo": trailer.model_dump(mode="json") if trailer else None,
        }

    @fastapi_app.get("/profiles/select")
    async def profile_selection_view() -> dict[str, Any]:
        return await _profiles_view("profiles.select")

    @fastapi_app.get("/profiles/manage")
    async def manage_profiles_view() -> dict[str, Any]:
        return await _profiles_view("profiles.manage")

    @fastapi_app.post("/profiles", status_code=201)
    async def create_profile(payload: ProfileInput) -> dict[str, Any]:
        user = require_user()
        directory = profile_directory()
        try:
            profile = await directory.create_profile(user.uid, payload)
            await directory.sync_profiles(user.uid)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return {"profile": profile.to_payload(), **profiles_payload("profiles.manage")}

    @fastapi_app.delete("/profiles/selection")
    async def clear_profile_selection() -> dict[str, Any]:
        profile_directory().clear_selection()
        return {"currentProfile": None}

    @fastapi_app.put("/profiles/{profile_id}")
    async def update_profile(profile_id: str, payload: ProfileInput) -> dict[str, Any]:
        user = require_user()
        directory = profile_directory()
        try:
            await directory.update_profile(profile_id, payload)
            await directory.sync_profiles(user.uid)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return profiles_payload("profiles.manage")

    @fastapi_app.delete("/profiles/{profile_id}")
    async def delete_profile(profile_id: str) -> dict[str, Any]:
        user = require_user()
        directory = profile_directory()
        try:
            await directory.delete_profile(profile_id)
            await directory.sync_profiles(user.uid)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return profiles_payload("profiles.manage")

    @fastapi_app.post("/profiles/{profile_id}/select")
    async def select_profile(profile_id: str) -> dict[str, Any]:
        require_user()
        profile: Profile | None = next(
            (entry for entry in store().profiles if entry.id == profile_id), None
        )
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found")
        profile_directory().select_profile(profile)
        return {"path": BROWSE_PATH, "currentProfile": profile.to_payload()}

    @fastapi_app.post("/gpt/toggle")
    async def toggle_gpt_search() -> dict[str, bool]:
        search = _get_service(fastapi_app, "gpt_search", GptSearchService)
        return {"showGptSearch": search.toggle_view()}

    @fastapi_app.put("/gpt/language")
    async def change_language(payload: LanguagePayload) -> dict[str, str]:
        search = _get_service(fastapi_app, "gpt_search", GptSearchService)
        try:
            search.change_language(payload.lang)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return {"lang": store().language}

    @fastapi_app.post("/gpt/search")
    async def gpt_search(payload: SearchPayload) -> JSONResponse:
        require_user()
        search = _get_service(fastapi_app, "gpt_search", GptSearchService)
        try:
            await search.search(payload.query)
        except MovieDeckError as exc:
            raise _http_error(exc) from exc
        return JSONResponse(store().snapshot()["gpt"])


app = create_app()
