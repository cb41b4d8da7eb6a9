"""Batch protocol shared by every slip pipeline.

1. ``lock_batch``: lock every order (ascending id order) and return them
   in request order.
2. ``validate_batch``: check the whole batch before anything is written.
   The first order with an open claim, the wrong owner or an ineligible
   status aborts the batch and is named in the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Set, Type
from uuid import UUID

import structlog

from modules.core.exceptions import (
    OrderAlreadyClaimed,
    OrderNotEligible,
    OrderNotOwnedByParty,
)
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


def lock_batch(
    order_repository: IOrderRepository, order_ids: Sequence[UUID | str]
) -> List[Order]:
    requested = [str(i) for i in order_ids]
    locked = order_repository.lock_many(sorted(set(requested)))
    orders = []
    for order_id in requested:
        order = locked.get(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.", order_id=order_id)
        orders.append(order)
    return orders


def validate_batch(
    orders: List[Order],
    *,
    claimed: Set[str],
    owner: Callable[[Order], Optional[str]],
    party_name: str,
    party_label: str,
    slip_label: str,
    accepts: Callable[[Order], bool],
    not_eligible: Type[OrderNotEligible] = OrderNotEligible,
) -> None:
    for order in orders:
        order_id = str(order.id)
        if order_id in claimed:
            logger.warning(
                "slips.order_already_claimed", order_id=order_id, slip=slip_label
            )
            raise OrderAlreadyClaimed(
                f"Order #{order.order_number} is already on an open {slip_label}.",
                order_id=order_id,
            )
        if owner(order) != party_name:
            logger.warning(
                "slips.order_not_owned",
                order_id=order_id,
                party=party_label,
                expected=party_name,
            )
            raise OrderNotOwnedByParty(
                f"Order #{order.order_number} does not belong to {party_label} "
                f"'{party_name}'.",
                order_id=order_id,
            )
        if not accepts(order):
            logger.warning(
                "slips.order_not_eligible",
                order_id=order_id,
                status=order.status,
                slip=slip_label,
            )
            raise not_eligible(
                f"Order #{order.order_number} in status {order.status} cannot go "
                f"on a {slip_label}.",
                order_id=order_id,
            )
