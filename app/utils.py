"""Utility helpers for the MovieDeck service."""

from __future__ import annotations

import json
import re
from typing import Any


JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
BARE_JSON_RE = re.compile(r"\{.*\}", re.DOTALL)
EMAIL_RE = re.compile(r"^([a-zA-Z0-9._%-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})$")
PASSWORD_RE = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z])(?=.*[a-zA-Z]).{8,}$")


def validate_credentials(email: str, password: str) -> str | None:
    """Return an error message for malformed sign-in input, or ``None``."""

    if not EMAIL_RE.match(email or ""):
        return "Email ID is not valid"
    if not PASSWORD_RE.match(password or ""):
        return "Password ID is not valid"
    return None


def extract_json_object(content: str) -> dict[str, Any]:
    """Extract and parse the first JSON object from the model response."""

    match = JSON_BLOCK_RE.search(content)
    if match:
        payload = match.group(1)
    else:
        match = BARE_JSON_RE.search(content)
        if not match:
            raise ValueError("No JSON object found in response")
        payload = match.group(0)

    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:  # pragma: no cover - defensive branch
        raise ValueError("Invalid JSON payload produced by the model") from exc


def parse_movie_names(content: str, *, limit: int) -> list[str]:
    """Return up to ``limit`` distinct movie titles from a model reply.

    Accepts ``{"movies": [...]}`` JSON or a plain comma separated line.
    """

    names: list[str]
    try:
        data = extract_json_object(content)
    except ValueError:
        names = [part.strip().strip("\"'") for part in content.split(",")]
    else:
        raw = data.get("movies") or data.get("titles") or []
        names = [str(entry).strip() for entry in raw if isinstance(entry, (str, int))]

    cleaned: list[str] = []
    seen: set[str] = set()
    for name in names:
        if not name or name.casefold() in seen:
            continue
        seen.add(name.casefold())
        cleaned.append(name)
        if len(cleaned) >= limit:
            break
    return cleaned
