"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from shared.domain.exceptions import NotFoundError, ValidationError


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    code = "order_not_found"


class InvalidOrderStatus(ValidationError):
    """The Transition Validator rejected the requested status change.

    ``code`` carries the validator's reason code (``driver_required``,
    ``status_unchanged`` ...).
    """

    code = "invalid_status"


class ProtectedOrderField(ValidationError):
    """A direct field edit targeted a field only transitions may write."""

    code = "protected_field"


class InvalidOrderField(ValidationError):
    """A direct field edit carried an unknown field or an unacceptable value."""

    code = "invalid_field"
