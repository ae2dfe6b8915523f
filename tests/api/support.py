# This file provides shared helpers for API endpoint tests.
# Tests override the repository and database dependencies without touching a real database.
# The helpers build consistent config objects and scoped TestClient contexts.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi.testclient import TestClient

from member_service.api.api_config import ApiConfig
from member_service.api.app import app
from member_service.api.dependencies import (
    get_config,
    get_database_client,
    get_member_repository,
    get_member_status,
)
from member_service.common.member_status import MemberStatusCodes
from member_service.members.errors import NotFoundError
from member_service.members.models import Member
from tests.member_fixtures import STATUS_CODES, fixture_members


def build_test_config(*, default_max_result: int = 20) -> ApiConfig:
    """Create deterministic API config for tests."""

    return ApiConfig(
        api_name="Test Member API",
        api_version_path="/api/v1",
        schema_version="1.0.0",
        host="0.0.0.0",
        port=8000,
        environment="test",
        database_url="sqlite+pysqlite:///:memory:",
        default_max_result=default_max_result,
        default_sorting="-updated_at",
        enable_request_logging=False,
        allowed_origins=[],
        members_table_name="members",
        request_log_table_name="api_request_log",
        app_version="0.1.0",
    )


class FakeDBClient:
    """Simple fake DB dependency for health/readiness endpoint tests."""

    def __init__(self, *, connected: bool = True, existing_tables: set[str] | None = None) -> None:
        self._connected = connected
        self._tables = {"members"} if existing_tables is None else existing_tables

    def can_connect(self) -> bool:
        return self._connected

    def table_exists(self, table_name: str) -> bool:
        return self._connected and table_name in self._tables

    def log_request(self, **_: Any) -> None:
        return None


class FakeMemberRepository:
    """Records repository calls and serves the fixture members."""

    def __init__(self, members: list[Member] | None = None) -> None:
        self.members = fixture_members() if members is None else members
        self.calls: list[tuple[str, Any]] = []
        self.next_id = 4

    def get_members(self, args: Any) -> list[Member]:
        self.calls.append(("get_members", args))
        return [member.without("password", "salt") for member in self.members]

    def filter_members(self, args: Any) -> list[Member]:
        self.calls.append(("filter_members", args))
        if args.fields:
            return [Member(**{name: getattr(member, name) for name in args.fields}) for member in self.members]
        return list(self.members)

    def count(self, args: Any) -> int:
        self.calls.append(("count", args))
        return len(self.members)

    def get_ids_by_nickname(self, args: Any) -> list[Member]:
        self.calls.append(("get_ids_by_nickname", args))
        return [
            Member(id=member.id, nickname=member.nickname)
            for member in self.members
            if member.nickname and member.nickname.startswith(args.keyword)
        ]

    def get_member(self, args: Any) -> Member:
        self.calls.append(("get_member", args))
        for member in self.members:
            if str(getattr(member, args.id_type)) == args.id:
                return member
        raise NotFoundError("User Not Found")

    def insert_member(self, member: Member) -> int:
        self.calls.append(("insert_member", member))
        return self.next_id

    def update_member(self, member: Member) -> None:
        self.calls.append(("update_member", member))

    def update_password(self, member_id: int, password: str) -> None:
        self.calls.append(("update_password", (member_id, password)))

    def delete_member(self, id_type: str, id: str) -> None:
        self.calls.append(("delete_member", (id_type, id)))

    def update_all(self, ids: list[int], active: int) -> None:
        self.calls.append(("update_all", (ids, active)))

    def last_call(self, name: str) -> Any:
        for call_name, payload in reversed(self.calls):
            if call_name == name:
                return payload
        raise AssertionError(f"repository method {name} was not called")


@contextmanager
def api_test_client(
    *,
    config: ApiConfig | None = None,
    db_client: Any | None = None,
    repository: Any | None = None,
    status_codes: MemberStatusCodes | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    resolved_config = config or build_test_config()
    resolved_status = status_codes or STATUS_CODES

    app.dependency_overrides[get_config] = lambda: resolved_config
    app.dependency_overrides[get_member_status] = lambda: resolved_status
    if db_client is not None:
        app.dependency_overrides[get_database_client] = lambda: db_client
    if repository is not None:
        app.dependency_overrides[get_member_repository] = lambda: repository

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
