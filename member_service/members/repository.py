# This file implements the member repository: one method per member use case.
# It executes statements produced by the assembler and maps rows back into Member values.
# Affected-row counts are checked against each operation's cardinality and translated into
# domain errors; any other driver failure propagates to the caller unchanged.

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError

from member_service.api.db_access import DatabaseClient
from member_service.common.member_status import MemberStatusCodes
from member_service.members import security
from member_service.members.args import (
    FilterMemberArgs,
    GetMemberArgs,
    GetMembersArgs,
    GetMembersKeywordsArgs,
)
from member_service.members.assembler import (
    Statement,
    count_statement,
    insert_statement,
    select_statement,
    update_columns_statement,
    update_statement,
)
from member_service.members.errors import (
    DuplicateEntryError,
    IntegrityViolationError,
    NotFoundError,
    ValidationError,
)
from member_service.members.fields import MEMBER_FIELDS, SELECTABLE_FIELDS, validate_fields
from member_service.members.models import Member
from member_service.members.paging import Paging, build_paging
from member_service.members.predicates import (
    Predicate,
    filter_predicate,
    keyword_predicate,
    member_lookup_predicate,
    members_predicate,
    predicate_for,
)

LOGGER = logging.getLogger("members")

KEYWORD_DEFAULT_FIELDS = ("id", "nickname")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return "unique" in message or "duplicate" in message


class MemberRepository:
    """Data access for the members table."""

    def __init__(self, *, db: DatabaseClient, status_codes: MemberStatusCodes) -> None:
        self.db = db
        self.status_codes = status_codes

    def get_member(self, args: GetMemberArgs) -> Member:
        statement = select_statement(MEMBER_FIELDS, member_lookup_predicate(args))
        row = self._fetch_one(statement)
        if row is None:
            raise NotFoundError("User Not Found")
        return Member.model_validate(row)

    def get_members(self, args: GetMembersArgs) -> list[Member]:
        paging = build_paging(sorting=args.sorting, max_result=args.max_result, page=args.page)
        statement = select_statement(SELECTABLE_FIELDS, members_predicate(args), paging)
        return [Member.model_validate(row) for row in self._fetch_all(statement)]

    def filter_members(self, args: FilterMemberArgs) -> list[Member]:
        fields = validate_fields(args.fields) or list(SELECTABLE_FIELDS)
        paging = build_paging(sorting=args.sorting, max_result=args.max_result, page=args.page)
        statement = select_statement(fields, filter_predicate(args), paging)
        return [Member.model_validate(row) for row in self._fetch_all(statement)]

    def count(self, args: GetMembersArgs | FilterMemberArgs) -> int:
        statement = count_statement(predicate_for(args))
        return int(self.db.fetch_scalar(statement.sql, statement.params, expanding=statement.expanding))

    def get_ids_by_nickname(self, args: GetMembersKeywordsArgs) -> list[Member]:
        """Active members whose nickname starts with the keyword; id and nickname are always returned."""

        predicate = keyword_predicate(args, active_code=self.status_codes.active)
        fields = validate_fields(args.fields)
        for default_field in KEYWORD_DEFAULT_FIELDS:
            if default_field not in fields:
                fields.append(default_field)
        statement = select_statement(fields, predicate)
        return [Member.model_validate(row) for row in self._fetch_all(statement)]

    def insert_member(self, member: Member) -> int:
        if not member.member_id:
            if not member.mail:
                raise ValidationError("Invalid member id")
            member = member.with_values(member_id=member.mail)
        if self._existing_id(member) is not None:
            LOGGER.warning("Rejected duplicate member id=%s member_id=%s", member.id, member.member_id)
            raise DuplicateEntryError("Duplicate entry")

        now = _utc_now()
        defaults: dict[str, object] = {}
        if not member.uuid:
            defaults["uuid"] = str(uuid.uuid4())
        if "created_at" not in member.model_fields_set:
            defaults["created_at"] = now
        if "updated_at" not in member.model_fields_set:
            defaults["updated_at"] = now
        if defaults:
            member = member.with_values(**defaults)

        statement = insert_statement(member)
        try:
            result = self.db.insert(statement.sql, statement.params, expanding=statement.expanding)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                LOGGER.warning("Storage rejected duplicate member_id=%s", member.member_id)
                raise DuplicateEntryError("Duplicate entry") from exc
            raise

        if result.rowcount > 1:
            raise IntegrityViolationError("More Than One Rows Affected")
        if result.rowcount == 0 or result.last_id is None:
            raise IntegrityViolationError("No Row Inserted")
        LOGGER.info("Inserted member id=%s member_id=%s", result.last_id, member.member_id)
        return result.last_id

    def update_member(self, member: Member) -> None:
        if member.id is None:
            raise ValidationError("Invalid member id")
        if not member.model_fields_set - {"id"}:
            raise ValidationError("No fields to update")
        if "updated_at" not in member.model_fields_set:
            member = member.with_values(updated_at=_utc_now())
        rowcount = self._execute(update_statement(member))
        self._expect_single_row(rowcount, not_found="User Not Found")
        LOGGER.info("Updated member id=%s fields=%s", member.id, sorted(member.model_fields_set - {"id"}))

    def update_password(self, member_id: int, password: str) -> None:
        if not password:
            raise ValidationError("Invalid password")
        salt = security.generate_salt()
        self.update_member(
            Member(id=member_id, password=security.hash_password(password, salt), salt=salt)
        )

    def delete_member(self, id_type: str, id: str) -> None:
        predicate = member_lookup_predicate(GetMemberArgs(id_type=id_type, id=id))
        rowcount = self._execute(update_columns_statement({"active": self.status_codes.delete}, predicate))
        self._expect_single_row(rowcount, not_found="User Not Found")
        LOGGER.info("Deleted member %s=%s", id_type, id)

    def update_all(self, ids: list[int], active: int) -> None:
        """Set the active status for every listed id."""

        if not ids:
            raise ValidationError("ID List Empty")
        predicate = Predicate().where("members.id IN ?", list(ids))
        rowcount = self._execute(update_columns_statement({"active": active}, predicate))
        if rowcount == 0:
            raise NotFoundError("Members Not Found")
        if rowcount > len(ids):
            raise IntegrityViolationError("More Rows Affected")
        LOGGER.info("Set active=%s for %s members", active, rowcount)

    def _existing_id(self, member: Member) -> int | None:
        clauses = ["members.member_id = ?"]
        values: list[object] = [member.member_id]
        if member.id is not None:
            clauses.append("members.id = ?")
            values.append(member.id)
        predicate = Predicate().where(f"({' OR '.join(clauses)})", *values)
        row = self._fetch_one(select_statement(["id"], predicate, Paging(limit=1)))
        return int(row["id"]) if row is not None else None

    @staticmethod
    def _expect_single_row(rowcount: int, *, not_found: str) -> None:
        if rowcount == 0:
            raise NotFoundError(not_found)
        if rowcount > 1:
            raise IntegrityViolationError("More Than One Rows Affected")

    def _fetch_all(self, statement: Statement) -> list[dict[str, object]]:
        return self.db.fetch_all(statement.sql, statement.params, expanding=statement.expanding)

    def _fetch_one(self, statement: Statement) -> dict[str, object] | None:
        return self.db.fetch_one(statement.sql, statement.params, expanding=statement.expanding)

    def _execute(self, statement: Statement) -> int:
        return self.db.execute(statement.sql, statement.params, expanding=statement.expanding)
