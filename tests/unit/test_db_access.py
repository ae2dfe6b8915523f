"""
Unit tests for the SQLAlchemy client wrapper.
"""

import pytest
from sqlalchemy import text

from member_service.api.db_access import DatabaseClient


def test_connectivity_and_table_checks(member_db: DatabaseClient) -> None:
    assert member_db.can_connect() is True
    assert member_db.table_exists("members") is True
    assert member_db.table_exists("api_request_log") is False


def test_unsafe_identifiers_are_rejected(member_db: DatabaseClient) -> None:
    with pytest.raises(ValueError, match="Unsafe SQL identifier"):
        member_db.table_exists("members; DROP TABLE members")


def test_expanding_parameters_render_one_placeholder_per_element(member_db: DatabaseClient) -> None:
    for member_id in ("a", "b", "c"):
        member_db.insert("INSERT INTO members (member_id) VALUES (:member_id)", {"member_id": member_id})

    rows = member_db.fetch_all(
        "SELECT member_id FROM members WHERE member_id IN :ids ORDER BY member_id",
        {"ids": ["a", "c"]},
        expanding=["ids"],
    )
    assert rows == [{"member_id": "a"}, {"member_id": "c"}]


def test_insert_reports_generated_id_and_execute_reports_rowcount(member_db: DatabaseClient) -> None:
    first = member_db.insert("INSERT INTO members (member_id) VALUES (:member_id)", {"member_id": "a"})
    second = member_db.insert("INSERT INTO members (member_id) VALUES (:member_id)", {"member_id": "b"})

    assert (first.rowcount, first.last_id) == (1, 1)
    assert (second.rowcount, second.last_id) == (1, 2)
    assert member_db.execute("UPDATE members SET active = :active", {"active": 1}) == 2
    assert member_db.fetch_scalar("SELECT COUNT(*) FROM members WHERE active = :active", {"active": 1}) == 2


def test_request_log_is_skipped_without_table(member_db: DatabaseClient) -> None:
    member_db.log_request(
        table_name="api_request_log",
        request_id="req-1",
        path="/health",
        method="GET",
        status_code=200,
        duration_ms=1.5,
    )


def test_request_log_written_when_table_exists(member_db: DatabaseClient) -> None:
    with member_db.engine.begin() as connection:
        connection.execute(
            text(
                """
                CREATE TABLE api_request_log (
                    request_id TEXT,
                    path TEXT,
                    method TEXT,
                    status_code INTEGER,
                    duration_ms REAL,
                    created_at TIMESTAMP
                )
                """
            )
        )
    member_db.log_request(
        table_name="api_request_log",
        request_id="req-1",
        path="/health",
        method="GET",
        status_code=200,
        duration_ms=1.5,
    )

    row = member_db.fetch_one("SELECT request_id, status_code FROM api_request_log")
    assert row == {"request_id": "req-1", "status_code": 200}
