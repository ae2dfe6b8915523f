# This file defines member endpoints under the versioned API path.
# Query parameters carrying operator maps, id lists, or date ranges are JSON-encoded strings.
# Routers translate HTTP input into repository argument shapes and wrap results in envelopes.
# Domain errors raised by the repository are mapped to status codes by the global handlers.

from __future__ import annotations

import logging
from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from member_service.api.api_config import ApiConfig
from member_service.api.dependencies import get_config, get_member_repository, get_member_status
from member_service.api.error_handlers import APIError
from member_service.api.response_envelope import build_list_envelope, build_object_envelope
from member_service.api.schemas.common import PaginationMetadata
from member_service.api.schemas.member_schemas import (
    BulkActiveRequest,
    CountResponseV1,
    InsertedResponseV1,
    MemberListResponseV1,
    MemberResponseV1,
    MemberSearchResponseV1,
    MutationResponseV1,
    PasswordUpdateRequest,
)
from member_service.common.member_status import MemberStatusCodes
from member_service.members import security
from member_service.members.args import (
    FilterMemberArgs,
    GetMemberArgs,
    GetMembersArgs,
    GetMembersKeywordsArgs,
    OperatorFilter,
)
from member_service.members.models import SECRET_FIELDS, Member
from member_service.members.predicates import validate_active_values
from member_service.members.repository import MemberRepository

LOGGER = logging.getLogger("members")

router = APIRouter(tags=["members"])
RepositoryDep = Annotated[MemberRepository, Depends(get_member_repository)]
StatusDep = Annotated[MemberStatusCodes, Depends(get_member_status)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]

_OPERATOR_ADAPTER: TypeAdapter[dict[str, list[int]]] = TypeAdapter(dict[str, list[int]])
_RANGE_ADAPTER: TypeAdapter[dict[str, datetime]] = TypeAdapter(dict[str, datetime])
_INT_LIST_ADAPTER: TypeAdapter[list[int]] = TypeAdapter(list[int])
_STR_LIST_ADAPTER: TypeAdapter[list[str]] = TypeAdapter(list[str])


def _parse_json_param(name: str, raw: str | None, adapter: TypeAdapter[Any]) -> Any:
    if raw is None or raw.strip() == "":
        return None
    try:
        return adapter.validate_json(raw)
    except PydanticValidationError as exc:
        raise APIError(
            status_code=400,
            error_code="INVALID_QUERY_PARAM",
            message=f"Invalid {name} parameter.",
            details=[error["msg"] for error in exc.errors()],
        ) from exc


def _lookup_type(member_key: str) -> str:
    """Numeric path keys address the storage id; anything else is an external member_id."""

    return "id" if member_key.isdigit() else "member_id"


def _active_filter(raw: str | None, status_codes: MemberStatusCodes) -> OperatorFilter:
    active = _parse_json_param("active", raw, _OPERATOR_ADAPTER)
    if active is None:
        return {"$nin": [status_codes.delete]}
    if len(active) == 1:
        validate_active_values(next(iter(active.values())), status_codes.values())
    return active


def _pagination(*, page: int, max_result: int, sort: str, total: int | None) -> dict[str, Any]:
    meta = PaginationMetadata(page=page, max_result=max_result, sort=sort, total_count=total)
    return meta.model_dump(exclude_none=True)


def _hash_credentials(member: Member) -> Member:
    if "password" not in member.model_fields_set or not member.password:
        return member.without(*SECRET_FIELDS)
    salt = security.generate_salt()
    return member.with_values(password=security.hash_password(member.password, salt), salt=salt)


def get_members_args(
    config: ConfigDep,
    status_codes: StatusDep,
    max_result: int | None = Query(default=None, ge=0),
    page: int = Query(default=1, ge=0),
    sort: str | None = Query(default=None),
    custom_editor: bool = Query(default=False),
    role: int | None = Query(default=None),
    active: str | None = Query(default=None, description='JSON operator map, e.g. {"$in": [1]}'),
    ids: str | None = Query(default=None, description="JSON list of member ids"),
    uuids: str | None = Query(default=None, description="JSON list of member uuids"),
    total: bool = Query(default=False),
) -> GetMembersArgs:
    return GetMembersArgs(
        max_result=config.default_max_result if max_result is None else max_result,
        page=page,
        sorting=sort if sort is not None else config.default_sorting,
        custom_editor=custom_editor,
        role=role,
        active=_active_filter(active, status_codes),
        ids=_parse_json_param("ids", ids, _INT_LIST_ADAPTER) or [],
        uuids=_parse_json_param("uuids", uuids, _STR_LIST_ADAPTER) or [],
        total=total,
    )


MembersArgsDep = Annotated[GetMembersArgs, Depends(get_members_args)]


@router.get("/members", response_model=MemberListResponseV1, response_model_exclude_unset=True)
def list_members(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    args: MembersArgsDep,
) -> dict[str, object]:
    members = repository.get_members(args)
    total = repository.count(args) if args.total else None
    return build_list_envelope(
        config=config,
        request_id=request.state.request_id,
        data=[member.to_public_dict() for member in members],
        pagination=_pagination(page=args.page, max_result=args.max_result, sort=args.sorting, total=total),
    )


@router.get("/members/count", response_model=CountResponseV1)
def count_members(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    args: MembersArgsDep,
) -> dict[str, object]:
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data={"total": repository.count(args)},
    )


@router.get("/members/filter", response_model=MemberListResponseV1, response_model_exclude_unset=True)
def filter_members(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    max_result: int | None = Query(default=None, ge=0),
    page: int = Query(default=1, ge=0),
    sort: str | None = Query(default=None),
    id: int = Query(default=0, ge=0),
    mail: str = Query(default=""),
    nickname: str = Query(default=""),
    created_at: str | None = Query(default=None, description='JSON range, e.g. {"$gt": "2017-01-01T00:00:00Z"}'),
    updated_at: str | None = Query(default=None, description="JSON range with $gt and/or $lt"),
    fields: str | None = Query(default=None, description="JSON list of column names"),
    total: bool = Query(default=False),
) -> dict[str, object]:
    args = FilterMemberArgs(
        max_result=config.default_max_result if max_result is None else max_result,
        page=page,
        sorting=sort if sort is not None else config.default_sorting,
        id=id,
        mail=mail,
        nickname=nickname,
        created_at=_parse_json_param("created_at", created_at, _RANGE_ADAPTER) or {},
        updated_at=_parse_json_param("updated_at", updated_at, _RANGE_ADAPTER) or {},
        fields=_parse_json_param("fields", fields, _STR_LIST_ADAPTER) or [],
    )
    members = repository.filter_members(args)
    count = repository.count(args) if total else None
    return build_list_envelope(
        config=config,
        request_id=request.state.request_id,
        data=[member.to_public_dict() for member in members],
        pagination=_pagination(page=args.page, max_result=args.max_result, sort=args.sorting, total=count),
    )


@router.get("/members/nickname", response_model=MemberSearchResponseV1, response_model_exclude_unset=True)
def members_by_nickname(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    keyword: str = Query(default=""),
    roles: str | None = Query(default=None, description='JSON operator map, e.g. {"$in": [1, 2]}'),
    fields: str | None = Query(default=None, description="JSON list of column names"),
) -> dict[str, object]:
    args = GetMembersKeywordsArgs(
        keyword=keyword,
        roles=_parse_json_param("roles", roles, _OPERATOR_ADAPTER),
        fields=_parse_json_param("fields", fields, _STR_LIST_ADAPTER) or [],
    )
    members = repository.get_ids_by_nickname(args)
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=[member.to_public_dict() for member in members],
    )


@router.put("/members", response_model=MutationResponseV1)
def update_members_active(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    status_codes: StatusDep,
    payload: BulkActiveRequest,
) -> dict[str, object]:
    active = status_codes.active if payload.active is None else payload.active
    validate_active_values([active], status_codes.values())
    repository.update_all(payload.ids, active)
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"status": "ok"})


@router.delete("/members", response_model=MutationResponseV1)
def delete_members(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    status_codes: StatusDep,
    ids: str | None = Query(default=None, description="JSON list of member ids"),
) -> dict[str, object]:
    repository.update_all(_parse_json_param("ids", ids, _INT_LIST_ADAPTER) or [], status_codes.delete)
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"status": "ok"})


@router.get("/member/{member_key}", response_model=MemberResponseV1, response_model_exclude_unset=True)
def get_member(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    member_key: str,
    mode: str | None = Query(default=None, description="Restrict the lookup to one register_mode"),
) -> dict[str, object]:
    member = repository.get_member(GetMemberArgs(id_type=_lookup_type(member_key), id=member_key, mode=mode))
    return build_object_envelope(
        config=config,
        request_id=request.state.request_id,
        data=member.to_public_dict(),
    )


@router.post("/member", response_model=InsertedResponseV1, status_code=201)
def create_member(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    member: Member,
) -> dict[str, object]:
    last_id = repository.insert_member(_hash_credentials(member))
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"last_id": last_id})


@router.put("/member", response_model=MutationResponseV1)
def update_member(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    member: Member,
) -> dict[str, object]:
    repository.update_member(member.without(*SECRET_FIELDS))
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"status": "ok"})


@router.put("/member/password", response_model=MutationResponseV1)
def update_member_password(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    payload: PasswordUpdateRequest,
) -> dict[str, object]:
    repository.update_password(payload.id, payload.password)
    LOGGER.info("Password changed for member id=%s", payload.id)
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"status": "ok"})


@router.delete("/member/{member_key}", response_model=MutationResponseV1)
def delete_member(
    request: Request,
    repository: RepositoryDep,
    config: ConfigDep,
    member_key: str,
) -> dict[str, object]:
    repository.delete_member(_lookup_type(member_key), member_key)
    return build_object_envelope(config=config, request_id=request.state.request_id, data={"status": "ok"})
