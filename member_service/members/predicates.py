# This module turns filter-argument shapes into WHERE-clause fragments.
# Every builder is a pure function returning a Predicate: ordered clauses joined with AND
# plus the values bound to their `?` placeholders, in the same order.
# Clause order is fixed per shape (equality, then text/range, then set membership)
# so the placeholder order never depends on how the caller ordered its input.

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from member_service.members.args import (
    FilterMemberArgs,
    GetMemberArgs,
    GetMembersArgs,
    GetMembersKeywordsArgs,
    OperatorFilter,
    RangeFilter,
)
from member_service.members.errors import ValidationError

SET_OPERATORS: dict[str, str] = {"$in": "IN", "$nin": "NOT IN"}
RANGE_OPERATORS: dict[str, str] = {"$gt": ">=", "$lt": "<="}
LOOKUP_ID_TYPES: frozenset[str] = frozenset({"id", "member_id", "mail"})


@dataclass(frozen=True)
class Predicate:
    clauses: tuple[str, ...] = ()
    values: tuple[Any, ...] = ()

    def where(self, clause: str, *values: Any) -> Predicate:
        if clause.count("?") != len(values):
            raise ValueError(f"Clause {clause!r} expects {clause.count('?')} values, got {len(values)}")
        return Predicate(self.clauses + (clause,), self.values + values)

    @property
    def sql(self) -> str:
        if not self.clauses:
            return ""
        return "WHERE " + " AND ".join(self.clauses)


def set_membership(predicate: Predicate, column: str, name: str, operators: OperatorFilter | None) -> Predicate:
    """Append `column IN ?` / `NOT IN ?` bound to one list value expanded at execution."""

    if not operators:
        return predicate
    if len(operators) > 1:
        raise ValidationError(f"Too many {name} lists")
    ((key, values),) = operators.items()
    sql_operator = SET_OPERATORS.get(key)
    if sql_operator is None:
        raise ValidationError(f"Invalid {name} operator: {key}")
    if not values:
        raise ValidationError(f"Empty {name} list")
    return predicate.where(f"{column} {sql_operator} ?", list(values))


def date_range(predicate: Predicate, column: str, name: str, bounds: RangeFilter | None) -> Predicate:
    """Append inclusive bounds: `$gt` becomes `>=`, `$lt` becomes `<=`."""

    if not bounds:
        return predicate
    unknown = sorted(set(bounds) - set(RANGE_OPERATORS))
    if unknown:
        raise ValidationError(f"Invalid {name} range operator: {unknown[0]}")
    for key in ("$gt", "$lt"):
        if key in bounds:
            predicate = predicate.where(f"{column} {RANGE_OPERATORS[key]} ?", bounds[key])
    return predicate


def contains(predicate: Predicate, column: str, value: Any) -> Predicate:
    # Wildcards inside the value are not escaped.
    return predicate.where(f"{column} LIKE ?", f"%{value}%")


def placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


def member_lookup_predicate(args: GetMemberArgs) -> Predicate:
    if args.id_type not in LOOKUP_ID_TYPES:
        raise ValidationError(f"Invalid id type: {args.id_type}")
    if not args.id:
        raise ValidationError("Invalid member id")
    predicate = Predicate().where(f"members.{args.id_type} = ?", args.id)
    if args.mode:
        predicate = predicate.where("members.register_mode = ?", args.mode)
    return predicate


def members_predicate(args: GetMembersArgs) -> Predicate:
    predicate = Predicate()
    if args.custom_editor:
        predicate = predicate.where("members.custom_editor = ?", True)
    if args.role is not None:
        predicate = predicate.where("members.role = ?", args.role)
    predicate = set_membership(predicate, "members.active", "active", args.active)
    if args.ids:
        predicate = predicate.where(f"members.id IN ({placeholders(len(args.ids))})", *args.ids)
    if args.uuids:
        predicate = predicate.where(f"members.uuid IN ({placeholders(len(args.uuids))})", *args.uuids)
    return predicate


def filter_predicate(args: FilterMemberArgs) -> Predicate:
    predicate = Predicate()
    if args.id:
        predicate = contains(predicate, "CAST(members.id AS CHAR(20))", args.id)
    if args.mail:
        predicate = contains(predicate, "members.mail", args.mail)
    if args.nickname:
        predicate = contains(predicate, "members.nickname", args.nickname)
    predicate = date_range(predicate, "members.created_at", "created_at", args.created_at)
    predicate = date_range(predicate, "members.updated_at", "updated_at", args.updated_at)
    return predicate


def keyword_predicate(args: GetMembersKeywordsArgs, *, active_code: int) -> Predicate:
    """Active members whose nickname starts with the keyword."""

    if not args.keyword:
        raise ValidationError("Invalid keyword")
    predicate = Predicate().where("members.active = ?", active_code)
    predicate = predicate.where("members.nickname LIKE ?", f"{args.keyword}%")
    return set_membership(predicate, "members.role", "roles", args.roles)


def predicate_for(args: GetMembersArgs | FilterMemberArgs) -> Predicate:
    if isinstance(args, GetMembersArgs):
        return members_predicate(args)
    if isinstance(args, FilterMemberArgs):
        return filter_predicate(args)
    raise TypeError(f"Unsupported count arguments: {type(args).__name__}")


def validate_active_values(values: Iterable[int], allowed: Iterable[int]) -> None:
    """Reject active filters referencing status codes that are not configured."""

    requested = list(values)
    allowed_codes = set(allowed)
    invalid = [value for value in requested if value not in allowed_codes]
    if not invalid:
        return
    if len(invalid) == len(requested):
        raise ValidationError("No valid active request")
    raise ValidationError("Not all active elements are valid")
