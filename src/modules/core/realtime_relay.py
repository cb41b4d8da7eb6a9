"""Wires the in-process realtime bus to the Celery relay task."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

import structlog

from shared.domain.bus import IRealtimeBus
from shared.infrastructure.realtime import REALTIME_EVENTS

logger = structlog.get_logger(__name__)


def _enqueue(event_name: str) -> Callable[[Dict[str, Any]], None]:
    def handler(payload: Dict[str, Any]) -> None:
        from modules.core.tasks import relay_realtime_event

        relay_realtime_event.delay(event_name, payload)

    return handler


def connect_relay(bus: IRealtimeBus) -> List[Callable[[], None]]:
    """Subscribe the relay to every realtime event; returns the unsubscribers."""
    unsubscribers = [bus.subscribe(name, _enqueue(name)) for name in REALTIME_EVENTS]
    logger.info("realtime.relay_connected", events=list(REALTIME_EVENTS))
    return unsubscribers
