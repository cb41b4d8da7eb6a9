"""Settlements domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import OrderNotEligible


class OrderNotSettleable(OrderNotEligible):
    """The order's status does not allow it on this kind of payment slip."""

    code = "order_not_settleable"
