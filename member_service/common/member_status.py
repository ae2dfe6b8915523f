# This module loads the member status sentinels stored in the `members.active` column.
# The integer codes for "active", "deactive", and "delete" live in a YAML file, not in code.
# A missing file or key is a startup failure; request handlers never see a partial mapping.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml

REQUIRED_STATUS_KEYS = ("active", "deactive", "delete")


@dataclass(frozen=True)
class MemberStatusCodes:
    active: int
    deactive: int
    delete: int

    def values(self) -> set[int]:
        return {self.active, self.deactive, self.delete}


def _load_yaml(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Member status file {path} must be a YAML mapping")
    return dict(loaded)


def status_codes_from_mapping(raw: dict[str, Any], *, source: str = "<mapping>") -> MemberStatusCodes:
    missing = [key for key in REQUIRED_STATUS_KEYS if key not in raw]
    if missing:
        raise RuntimeError(f"Member status config {source} missing required keys: {missing}")
    try:
        return MemberStatusCodes(**{key: int(raw[key]) for key in REQUIRED_STATUS_KEYS})
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"Member status config {source} must map keys to integers: {exc}") from exc


def load_member_status(path: str) -> MemberStatusCodes:
    """Read status sentinels from YAML; raise RuntimeError when unusable."""

    try:
        raw = _load_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise RuntimeError(f"Unable to load member status config {path}: {exc}") from exc
    return status_codes_from_mapping(raw, source=path)
