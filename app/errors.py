"""Exception taxonomy shared by the services and the HTTP layer."""

from __future__ import annotations


class MovieDeckError(Exception):
    """Base class for errors raised by MovieDeck services."""


class FetchError(MovieDeckError):
    """A request to an external API (catalog, model or profile store) failed."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationError(MovieDeckError, ValueError):
    """Required input for an operation was missing or malformed."""


class PersistenceError(MovieDeckError):
    """A profile store write failed after validation passed."""
