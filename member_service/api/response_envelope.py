# This file builds response envelopes for member endpoints in a consistent format.
# Downstream systems always receive version metadata and request tracing fields.
# The helpers return plain dictionaries that Pydantic response models validate at runtime.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from member_service.api.api_config import ApiConfig
from member_service.api.schema_versions import build_version_fields


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def build_list_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: list[dict[str, Any]],
    pagination: dict[str, Any],
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard list response envelope."""

    return {
        **build_version_fields(api_version_path=config.api_version_path, schema_version=config.schema_version),
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "pagination": pagination,
        "warnings": warnings,
    }


def build_object_envelope(
    *,
    config: ApiConfig,
    request_id: str,
    data: dict[str, Any] | list[dict[str, Any]] | None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    """Build standard non-list response envelope."""

    return {
        **build_version_fields(api_version_path=config.api_version_path, schema_version=config.schema_version),
        "request_id": request_id,
        "generated_at": utc_now(),
        "data": data,
        "warnings": warnings,
    }
