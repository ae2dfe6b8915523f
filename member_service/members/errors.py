# This module defines the error kinds raised by the member query layer and repository.
# Callers catch these by kind; the HTTP layer maps each kind to a status code.
# Driver failures are not wrapped: sqlalchemy.exc.SQLAlchemyError propagates unchanged.

from __future__ import annotations


class MemberError(Exception):
    """Base class for member domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(MemberError):
    """Zero rows matched a targeted lookup or mutation."""


class DuplicateEntryError(MemberError):
    """A uniqueness violation, pre-checked or reported by storage."""


class ValidationError(MemberError):
    """Malformed or over-specified filter input."""


class IntegrityViolationError(MemberError):
    """Affected-row count exceeded what the operation allows."""
