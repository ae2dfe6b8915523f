# This file wraps database access so the member repository can run parameterized SQL safely.
# It exists to keep SQL execution details out of router code and make testing easier.
# The helper applies set-expansion for list parameters and reports affected-row counts.
# Keeping this layer small makes query behavior easier to audit and troubleshoot.

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import bindparam, create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@dataclass(frozen=True)
class InsertResult:
    rowcount: int
    last_id: int | None


class DatabaseClient:
    """Minimal SQLAlchemy wrapper for API read/write access."""

    def __init__(self, *, database_url: str) -> None:
        self._engine: Engine = create_engine(database_url, pool_pre_ping=True, future=True)
        self._request_log_table_available: bool | None = None

    @property
    def engine(self) -> Engine:
        return self._engine

    def can_connect(self) -> bool:
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def table_exists(self, table_name: str) -> bool:
        self._validate_identifier(table_name)
        with self._engine.connect() as connection:
            return inspect(connection).has_table(table_name)

    def fetch_all(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Iterable[str] = (),
    ) -> list[dict[str, Any]]:
        with self._engine.connect() as connection:
            rows = connection.execute(self._text(query, expanding), dict(params or {})).mappings().all()
        return [dict(row) for row in rows]

    def fetch_one(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Iterable[str] = (),
    ) -> dict[str, Any] | None:
        with self._engine.connect() as connection:
            row = connection.execute(self._text(query, expanding), dict(params or {})).mappings().first()
        return dict(row) if row is not None else None

    def fetch_scalar(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Iterable[str] = (),
    ) -> Any:
        with self._engine.connect() as connection:
            return connection.execute(self._text(query, expanding), dict(params or {})).scalar_one()

    def execute(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Iterable[str] = (),
    ) -> int:
        """Run a write statement in its own transaction and return the affected-row count."""

        with self._engine.begin() as connection:
            result = connection.execute(self._text(query, expanding), dict(params or {}))
            return int(result.rowcount)

    def insert(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        *,
        expanding: Iterable[str] = (),
        id_column: str = "id",
    ) -> InsertResult:
        """Run an INSERT and report the generated primary key."""

        self._validate_identifier(id_column)
        with self._engine.begin() as connection:
            if self._engine.dialect.insert_returning:
                statement = self._text(f"{query} RETURNING {id_column}", expanding)
                ids = connection.execute(statement, dict(params or {})).scalars().all()
                return InsertResult(rowcount=len(ids), last_id=int(ids[-1]) if ids else None)
            result = connection.execute(self._text(query, expanding), dict(params or {}))
            last_id = result.lastrowid
            return InsertResult(rowcount=int(result.rowcount), last_id=int(last_id) if last_id else None)

    def log_request(
        self,
        *,
        table_name: str,
        request_id: str,
        path: str,
        method: str,
        status_code: int,
        duration_ms: float,
    ) -> None:
        safe_table = self._validate_identifier(table_name)
        if self._request_log_table_available is not True:
            self._request_log_table_available = self.table_exists(safe_table)
        if not self._request_log_table_available:
            return

        query = f"""
        INSERT INTO {safe_table} (request_id, path, method, status_code, duration_ms, created_at)
        VALUES (:request_id, :path, :method, :status_code, :duration_ms, CURRENT_TIMESTAMP)
        """
        self.execute(
            query,
            {
                "request_id": request_id,
                "path": path,
                "method": method,
                "status_code": status_code,
                "duration_ms": duration_ms,
            },
        )

    @staticmethod
    def _text(query: str, expanding: Iterable[str]) -> TextClause:
        statement = text(query)
        names = tuple(expanding)
        if names:
            statement = statement.bindparams(*(bindparam(name, expanding=True) for name in names))
        return statement

    def _validate_identifier(self, identifier: str) -> str:
        if not _IDENTIFIER_RE.match(identifier):
            raise ValueError(f"Unsafe SQL identifier: {identifier!r}")
        return identifier
