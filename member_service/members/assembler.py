# This module composes field lists, predicates, and paging into complete statements.
# Fragments are written with positional `?` placeholders; `rebind` numbers them in order
# into `:p0, :p1, ...` for SQLAlchemy `text()`. Values must line up with placeholders
# exactly (predicate values first, paging values second) or they bind to the wrong column.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from member_service.members.errors import ValidationError
from member_service.members.fields import get_fields
from member_service.members.models import Member
from member_service.members.paging import Paging
from member_service.members.predicates import Predicate

MEMBERS_TABLE = "members"

_LIST_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class Statement:
    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    expanding: tuple[str, ...] = ()


def rebind(sql: str, values: Sequence[Any]) -> Statement:
    """Rewrite positional `?` placeholders into named parameters.

    A list-like value becomes an expanding parameter: SQLAlchemy renders one
    placeholder per element at execution time.
    """

    pieces = sql.split("?")
    if len(pieces) - 1 != len(values):
        raise ValueError(f"Statement has {len(pieces) - 1} placeholders but {len(values)} values: {sql!r}")

    rendered = [pieces[0]]
    params: dict[str, Any] = {}
    expanding: list[str] = []
    for index, (value, tail) in enumerate(zip(values, pieces[1:])):
        name = f"p{index}"
        rendered.append(f":{name}{tail}")
        if isinstance(value, _LIST_TYPES):
            params[name] = list(value)
            expanding.append(name)
        else:
            params[name] = value
    return Statement(sql="".join(rendered), params=params, expanding=tuple(expanding))


def _join(*parts: str) -> str:
    return " ".join(part for part in parts if part)


def select_statement(fields: Sequence[str], predicate: Predicate, paging: Paging | None = None) -> Statement:
    paging = paging or Paging()
    sql = _join(f"SELECT {', '.join(fields)} FROM {MEMBERS_TABLE}", predicate.sql, paging.sql)
    return rebind(sql, predicate.values + paging.values)


def count_statement(predicate: Predicate) -> Statement:
    sql = _join(f"SELECT COUNT(*) FROM {MEMBERS_TABLE}", predicate.sql)
    return rebind(sql, predicate.values)


def insert_statement(member: Member) -> Statement:
    columns = get_fields(member, "partial")
    if not columns:
        raise ValidationError("Invalid member: no fields supplied")
    values = [getattr(member, column) for column in columns]
    sql = f"INSERT INTO {MEMBERS_TABLE} ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})"
    return rebind(sql, values)


def update_columns_statement(assignments: dict[str, Any], predicate: Predicate) -> Statement:
    if not assignments:
        raise ValidationError("No fields to update")
    if not predicate.clauses:
        raise ValueError("Refusing to build an UPDATE without a WHERE clause")
    set_sql = ", ".join(f"{column} = ?" for column in assignments)
    sql = _join(f"UPDATE {MEMBERS_TABLE} SET {set_sql}", predicate.sql)
    return rebind(sql, tuple(assignments.values()) + predicate.values)


def update_statement(member: Member) -> Statement:
    """Whole-row update restricted to the supplied fields, keyed by id."""

    if member.id is None:
        raise ValidationError("Invalid member id")
    assignments = {
        column: getattr(member, column) for column in get_fields(member, "partial") if column != "id"
    }
    return update_columns_statement(assignments, Predicate().where("id = ?", member.id))
