"""
Shared test configuration.
Required environment variables are seeded before the API app is imported by any test module.
Member storage tests run against a throwaway SQLite file through the real DatabaseClient.
"""

from __future__ import annotations

import os
import sqlite3
import sys
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import text

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

TEST_ENV_DEFAULTS = {
    "PROJECT_NAME": "test-project",
    "ENV": "test",
    "LOG_LEVEL": "INFO",
    "DATABASE_URL": "sqlite+pysqlite:///:memory:",
    "MEMBER_STATUS_PATH": str(ROOT_DIR / "configs" / "member_status.yaml"),
    "API_HOST": "0.0.0.0",
    "API_PORT": "8000",
}

for _key, _value in TEST_ENV_DEFAULTS.items():
    os.environ.setdefault(_key, _value)

# SQLite has no native timestamp type; store ISO strings so ordering and range filters compare correctly.
sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))

from member_service.api.db_access import DatabaseClient  # noqa: E402
from member_service.members.repository import MemberRepository  # noqa: E402
from tests.member_fixtures import MEMBERS_DDL, STATUS_CODES, fixture_members  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    for key, value in TEST_ENV_DEFAULTS.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)


@pytest.fixture
def member_db(tmp_path: Path) -> Iterator[DatabaseClient]:
    db = DatabaseClient(database_url=f"sqlite+pysqlite:///{tmp_path / 'members.db'}")
    with db.engine.begin() as connection:
        connection.execute(text(MEMBERS_DDL))
    yield db
    db.engine.dispose()


@pytest.fixture
def repository(member_db: DatabaseClient) -> MemberRepository:
    return MemberRepository(db=member_db, status_codes=STATUS_CODES)


@pytest.fixture
def seeded_repository(repository: MemberRepository) -> MemberRepository:
    for member in fixture_members():
        repository.insert_member(member)
    return repository
