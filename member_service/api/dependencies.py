# This file provides dependency factories for FastAPI routes and middleware.
# The database client, status codes, and repository are created once and shared through injection.
# Routers stay thin and endpoint tests swap any of these through dependency overrides.

from __future__ import annotations

from functools import lru_cache

from member_service.api.api_config import ApiConfig, get_api_config
from member_service.api.db_access import DatabaseClient
from member_service.common.member_status import MemberStatusCodes, load_member_status
from member_service.members.repository import MemberRepository


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(database_url=config.database_url)


@lru_cache(maxsize=1)
def get_member_status() -> MemberStatusCodes:
    config = get_api_config()
    return load_member_status(config.member_status_path)


@lru_cache(maxsize=1)
def get_member_repository() -> MemberRepository:
    return MemberRepository(db=get_database_client(), status_codes=get_member_status())


def get_config() -> ApiConfig:
    return get_api_config()
