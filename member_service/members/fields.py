# This module is the field registry for the members table.
# Column lists for SELECT, INSERT, and UPDATE statements are derived from the Member model
# so the SQL layer never drifts from the entity definition.

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

from member_service.members.errors import ValidationError
from member_service.members.models import SECRET_FIELDS, Member

FieldMode = Literal["full", "partial"]

MEMBER_FIELDS: tuple[str, ...] = tuple(Member.model_fields)
SELECTABLE_FIELDS: tuple[str, ...] = tuple(name for name in MEMBER_FIELDS if name not in SECRET_FIELDS)


def get_fields(member: Member | None = None, mode: FieldMode = "full") -> list[str]:
    """Return ordered column names; `partial` keeps only fields the caller supplied."""

    if mode == "full":
        return list(MEMBER_FIELDS)
    if mode == "partial":
        if member is None:
            raise ValueError("partial field mode requires a member value")
        return [name for name in MEMBER_FIELDS if name in member.model_fields_set]
    raise ValueError(f"Unknown field mode: {mode!r}")


def validate_fields(requested: Iterable[str]) -> list[str]:
    """Reject any requested column outside the selectable set."""

    fields = list(requested)
    for name in fields:
        if name not in SELECTABLE_FIELDS:
            raise ValidationError(f"Invalid fields: {name}")
    return fields
