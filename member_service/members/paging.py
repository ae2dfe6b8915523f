# This module builds the ORDER BY / LIMIT / OFFSET tail of list queries.
# Sort tokens use a leading `-` for descending order and must name a known column.
# A page size of zero means "no limit", in which case the page number is ignored.

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from member_service.members.errors import ValidationError
from member_service.members.fields import SELECTABLE_FIELDS


@dataclass(frozen=True)
class Paging:
    order_by: str = ""
    limit: int = 0
    offset: int | None = None

    @property
    def sql(self) -> str:
        parts: list[str] = []
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by}")
        if self.limit > 0:
            parts.append("LIMIT ?")
            if self.offset is not None:
                parts.append("OFFSET ?")
        return " ".join(parts)

    @property
    def values(self) -> tuple[int, ...]:
        if self.limit <= 0:
            return ()
        if self.offset is None:
            return (self.limit,)
        return (self.limit, self.offset)


def order_by_clause(sorting: str | None, allowed_fields: Iterable[str] = SELECTABLE_FIELDS) -> str:
    """Map `field` / `-field` to `field ASC` / `field DESC`."""

    token = (sorting or "").strip()
    if not token:
        return ""
    direction = "ASC"
    if token.startswith("-"):
        token = token[1:]
        direction = "DESC"
    if token not in set(allowed_fields):
        raise ValidationError(f"Invalid sort field: {token}")
    return f"{token} {direction}"


def build_paging(*, sorting: str | None, max_result: int, page: int) -> Paging:
    if max_result < 0:
        raise ValidationError("max_result must be >= 0")
    if page < 0:
        raise ValidationError("page must be >= 0")
    order_by = order_by_clause(sorting)
    if max_result == 0:
        return Paging(order_by=order_by)
    offset = (page - 1) * max_result if page > 0 else None
    return Paging(order_by=order_by, limit=max_result, offset=offset)
