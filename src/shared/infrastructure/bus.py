"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, Iterable, List, Type

import structlog
from django.db import transaction

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent, DomainEventMixin

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Repositories publish through ``transaction.on_commit`` so handlers
    only ever observe committed state.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def publish(self, event: DomainEvent) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug(
            "event_bus.dispatch",
            event_name=event.event_name,
            aggregate_id=str(event.aggregate_id),
            handler_count=len(handlers),
        )
        for handler in handlers:
            handler.handle(event)


# Global bus instance (singleton)

event_bus = InMemoryEventBus()


def publish_on_commit(
    events: Iterable[DomainEvent], bus: IEventBus | None = None
) -> int:
    """Schedule *events* for publication once the current transaction commits.

    Nothing is published if the transaction rolls back.  A failing
    handler is logged by Django and does not block later callbacks.
    """
    target = bus or event_bus
    count = 0
    for event in events:
        transaction.on_commit(
            lambda event=event: target.publish(event), robust=True
        )
        count += 1
    return count


def flush_domain_events(aggregate: DomainEventMixin, bus: IEventBus | None = None) -> int:
    """Move the aggregate's pending events onto the after-commit queue."""
    return publish_on_commit(aggregate.pull_domain_events(), bus)
