"""Pydantic models describing catalog payloads, profiles and identities."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Movie(BaseModel):
    """A single movie entry returned by the catalog API.

    Only the fields the browse views read are declared; anything else the
    catalog sends is kept as-is and serialised back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: int | None = None
    title: str | None = None
    original_title: str | None = None
    overview: str | None = None
    backdrop_path: str | None = None
    poster_path: str | None = None
    release_date: str | None = None


class TrailerVideo(BaseModel):
    """A video entry from ``/movie/{id}/videos``."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    type: str | None = None
    key: str | None = None
    name: str | None = None
    site: str | None = None


class Profile(BaseModel):
    """A viewing profile owned by one account."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    user_id: str = Field(alias="userId")
    name: str
    avatar: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class ProfileInput(BaseModel):
    """Fields accepted by the profile create/update operations."""

    name: str = ""
    avatar: str | None = None

    @property
    def avatar_supplied(self) -> bool:
        return "avatar" in self.model_fields_set


class Identity(BaseModel):
    """Signed-in user as reported by the identity provider."""

    model_config = ConfigDict(populate_by_name=True)

    uid: str
    email: str | None = None
    display_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("displayName", "display_name"),
        serialization_alias="displayName",
    )
    photo_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("photoURL", "photoUrl", "photo_url"),
        serialization_alias="photoURL",
    )
