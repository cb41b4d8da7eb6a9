"""Event handlers for Orders domain events.

Committed order changes are pushed to connected clients over the
realtime bus.  The bus is a hint channel: a dropped message never
affects order state.
"""

from __future__ import annotations

from typing import Optional

import structlog

from modules.orders.events import OrderCreated, OrderStatusChanged
from shared.domain.bus import IEventHandler, IRealtimeBus
from shared.infrastructure.realtime import (
    NEW_ORDER_CREATED,
    ORDER_STATUS_CHANGED,
    order_status_payload,
    realtime_bus,
)

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def __init__(self, bus: Optional[IRealtimeBus] = None) -> None:
        self._bus = bus or realtime_bus

    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=str(event.aggregate_id),
            order_number=event.order_number,
        )
        self._bus.publish(NEW_ORDER_CREATED, {"orderId": str(event.aggregate_id)})


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def __init__(self, bus: Optional[IRealtimeBus] = None) -> None:
        self._bus = bus or realtime_bus

    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )
        self._bus.publish(
            ORDER_STATUS_CHANGED,
            order_status_payload(event.aggregate_id, event.new_status, event.driver),
        )


order_created_handler = OrderCreatedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
