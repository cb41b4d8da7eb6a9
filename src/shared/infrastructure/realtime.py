"""Realtime notification bus.

Pushes order and driver changes to connected clients.  The channel is a
hint only: delivery is at-most-once and best-effort, so a failing
subscriber is logged and skipped, never re-raised into the publisher.
Clients recover from missed messages by re-fetching authoritative state.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List

import structlog

from shared.domain.bus import IRealtimeBus, RealtimeHandler

logger = structlog.get_logger(__name__)

ORDER_STATUS_CHANGED = "order_status_changed"
NEW_ORDER_CREATED = "new_order_created"
DRIVER_STATUS_UPDATE = "driver_status_update"

REALTIME_EVENTS = (ORDER_STATUS_CHANGED, NEW_ORDER_CREATED, DRIVER_STATUS_UPDATE)


class InMemoryRealtimeBus(IRealtimeBus):
    """Thread-safe, name-keyed publish/subscribe."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: Dict[str, List[RealtimeHandler]] = {}

    def subscribe(
        self, event_name: str, handler: RealtimeHandler
    ) -> Callable[[], None]:
        with self._lock:
            self._handlers.setdefault(event_name, []).append(handler)

        def unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_name, [])
                if handler in handlers:
                    handlers.remove(handler)

        return unsubscribe

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            handlers = list(self._handlers.get(event_name, []))

        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.warning(
                    "realtime.delivery_failed",
                    event_name=event_name,
                    exc_info=True,
                )

    def subscriber_count(self, event_name: str) -> int:
        with self._lock:
            return len(self._handlers.get(event_name, []))


def order_status_payload(
    order_id: Any, status: str, driver_name: str | None = None
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"orderId": str(order_id), "status": status}
    if driver_name:
        payload["driverName"] = driver_name
    return payload


def publish_driver_status(
    driver_id: str, is_online: bool, bus: IRealtimeBus | None = None
) -> None:
    """Broadcast a driver going on- or offline."""
    (bus or realtime_bus).publish(
        DRIVER_STATUS_UPDATE, {"driverId": str(driver_id), "isOnline": bool(is_online)}
    )


realtime_bus = InMemoryRealtimeBus()
