# This file defines request and response contracts for member endpoints.
# Member payloads never include credentials; password changes go through a dedicated body.
# List responses carry pagination metadata next to the envelope fields.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from member_service.api.schemas.common import EnvelopeFields, PaginationMetadata


class MemberV1(BaseModel):
    """Public member projection; fields the query did not select are omitted."""

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


class PasswordUpdateRequest(BaseModel):
    id: int
    password: str = Field(min_length=1, repr=False)


class BulkActiveRequest(BaseModel):
    ids: list[int]
    active: int | None = None


class CountV1(BaseModel):
    total: int


class InsertedV1(BaseModel):
    last_id: int


class MutationV1(BaseModel):
    status: str = "ok"


class MemberListResponseV1(EnvelopeFields):
    data: list[MemberV1]
    pagination: PaginationMetadata


class MemberResponseV1(EnvelopeFields):
    data: MemberV1


class CountResponseV1(EnvelopeFields):
    data: CountV1


class InsertedResponseV1(EnvelopeFields):
    data: InsertedV1


class MutationResponseV1(EnvelopeFields):
    data: MutationV1


class MemberSearchResponseV1(EnvelopeFields):
    data: list[MemberV1]
