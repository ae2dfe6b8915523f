# This module defines the Member entity persisted in the `members` table.
# One pydantic model serves both the full row and the partial projection.
# Presence is tracked by `model_fields_set`: a field supplied as None is "set to NULL",
# while a field never supplied is absent and stays out of INSERT/UPDATE column lists.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

SECRET_FIELDS: frozenset[str] = frozenset({"password", "salt"})


class Member(BaseModel):
    """A row of the members table; unset fields are distinct from NULL fields."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    member_id: str | None = None
    uuid: str | None = None
    points: int | None = None
    name: str | None = None
    nickname: str | None = None
    birthday: datetime | None = None
    gender: str | None = None
    work: str | None = None
    mail: str | None = None
    phone: str | None = None

    register_mode: str | None = None
    social_id: str | None = None
    talk_id: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    updated_by: int | None = None
    password: str | None = Field(default=None, repr=False)
    salt: str | None = Field(default=None, repr=False)
    premium_before: datetime | None = None

    description: str | None = None
    profile_image: str | None = None
    identity: str | None = None

    role: int | None = None
    active: int | None = None

    custom_editor: bool | None = None
    hide_profile: bool | None = None
    profile_push: bool | None = None
    post_push: bool | None = None
    daily_push: bool | None = None
    comment_push: bool | None = None

    def supplied(self) -> dict[str, Any]:
        """Return only the explicitly supplied fields, NULLs included."""

        return {name: getattr(self, name) for name in type(self).model_fields if name in self.model_fields_set}

    def with_values(self, **values: Any) -> Member:
        """Copy with extra fields marked as supplied."""

        return type(self)(**{**self.supplied(), **values})

    def without(self, *names: str) -> Member:
        return type(self)(**{key: value for key, value in self.supplied().items() if key not in names})

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize supplied fields for responses; credentials never leave the service."""

        return self.model_dump(exclude_unset=True, exclude=set(SECRET_FIELDS))
