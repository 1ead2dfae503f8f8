"""Module executed when running ``python -m moviedeck``."""

from __future__ import annotations

import logging

import uvicorn

from app.config import settings

logger = logging.getLogger("moviedeck")


def main() -> None:
    """Start the API server for the configured catalog and profile store."""

    if not settings.tmdb_access_token:
        raise SystemExit("TMDB_ACCESS_TOKEN must be set to browse the movie catalog")
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not set; GPT search will be unavailable")

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )


if __name__ == "__main__":  # pragma: no cover - runtime entrypoint
    main()
