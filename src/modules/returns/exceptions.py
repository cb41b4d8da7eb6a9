"""Returns domain exceptions.

Raised by the Service Layer when business rules are violated.  Claim
and ownership conflicts shared with the payment slips live in
``modules.core.exceptions``.
"""

from __future__ import annotations

from modules.core.exceptions import OrderNotEligible
from shared.domain.exceptions import DomainError


class OrderNotReturnable(OrderNotEligible):
    """The order's status does not allow it on this kind of return slip."""

    code = "order_not_returnable"


class SlipRenderingFailed(DomainError):
    """The rendering backend could not produce a document."""

    code = "slip_rendering_failed"
