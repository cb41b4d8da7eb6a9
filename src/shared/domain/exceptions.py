"""Domain error taxonomy shared by every bounded context.

Services raise these; the API layer translates them into HTTP
responses.  All of them are recoverable at the call site.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for business-rule failures.

    ``code`` is a stable, machine-readable identifier the UI can switch
    on; the message is for humans.
    """

    code = "domain_error"

    def __init__(self, message: str, *, code: str | None = None, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details


class NotFoundError(DomainError):
    """A referenced entity does not exist (stale id)."""

    code = "not_found"


class ValidationError(DomainError):
    """A user-correctable rule was violated."""

    code = "validation_error"


class ConflictError(DomainError):
    """The request conflicts with current state; refresh and re-select."""

    code = "conflict"
