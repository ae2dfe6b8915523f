# This file defines shared schema pieces reused by multiple API endpoints.
# Envelope metadata, pagination, and error payloads stay consistent across routers.

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PaginationMetadata(BaseModel):
    page: int = Field(ge=0)
    max_result: int = Field(ge=0)
    sort: str
    total_count: int | None = Field(default=None, ge=0)


class EnvelopeFields(BaseModel):
    api_version: str
    schema_version: str
    request_id: str
    generated_at: datetime
    warnings: list[str] | None = None


class ErrorResponse(BaseModel):
    error_code: str
    message: str
    details: Any | None = None
    request_id: str
    timestamp: datetime
