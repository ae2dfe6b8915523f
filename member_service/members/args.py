# This module defines the filter-argument shapes accepted by the member repository.
# Each shape corresponds to one query type: single lookup, list query, free-text filter,
# and nickname keyword search. Zero values mean "no filter" throughout.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_MAX_RESULT = 20
DEFAULT_PAGE = 1
DEFAULT_SORTING = "-updated_at"

OperatorFilter = dict[str, list[int]]
RangeFilter = dict[str, datetime]


@dataclass
class GetMemberArgs:
    id_type: str
    id: str
    mode: str | None = None


@dataclass
class GetMembersArgs:
    max_result: int = DEFAULT_MAX_RESULT
    page: int = DEFAULT_PAGE
    sorting: str = DEFAULT_SORTING
    custom_editor: bool = False
    role: int | None = None
    active: OperatorFilter | None = None
    ids: list[int] = field(default_factory=list)
    uuids: list[str] = field(default_factory=list)
    total: bool = False


@dataclass
class FilterMemberArgs:
    max_result: int = DEFAULT_MAX_RESULT
    page: int = DEFAULT_PAGE
    sorting: str = DEFAULT_SORTING
    id: int = 0
    mail: str = ""
    nickname: str = ""
    created_at: RangeFilter = field(default_factory=dict)
    updated_at: RangeFilter = field(default_factory=dict)
    fields: list[str] = field(default_factory=list)


@dataclass
class GetMembersKeywordsArgs:
    keyword: str = ""
    roles: OperatorFilter | None = None
    fields: list[str] = field(default_factory=list)
