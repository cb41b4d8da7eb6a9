"""Conflicts raised while assembling a slip.

Every conflict names the offending order so the caller can refresh and
re-select.
"""

from __future__ import annotations

from shared.domain.exceptions import ConflictError, NotFoundError


class SlipNotFound(NotFoundError):
    """The requested slip does not exist."""

    code = "slip_not_found"


class OrderAlreadyClaimed(ConflictError):
    """The order already sits on an open slip of the same kind."""

    code = "order_already_claimed"


class OrderNotOwnedByParty(ConflictError):
    """The order is not assigned to the driver/merchant named on the slip."""

    code = "order_not_owned"


class OrderNotEligible(ConflictError):
    """The order's status does not allow it on this kind of slip."""

    code = "order_not_eligible"
