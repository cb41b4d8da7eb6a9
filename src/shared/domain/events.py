"""Events raised by orders and slips.

An aggregate records what happened while a service method runs; the
repository hands the recorded events to the bus when it saves the
aggregate, and the bus delivers them only after the transaction commits.
Event ids are UUIDv7 so a log sorted by id is also sorted by time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List
from uuid import UUID

import uuid6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid6.uuid7)
    occurred_on: datetime = field(default_factory=_utcnow)
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", type(self).__name__)


class DomainEventMixin:
    """Pending-event buffer for ``Order`` and the slip headers.

    The buffer lives on the instance only; it is never persisted and a
    fresh instance loaded from the database starts empty.
    """

    def _pending(self) -> List[DomainEvent]:
        pending = self.__dict__.get("_domain_events")
        if pending is None:
            pending = self.__dict__["_domain_events"] = []
        return pending

    def add_domain_event(self, event: DomainEvent) -> None:
        self._pending().append(event)

    def clear_domain_events(self) -> None:
        self._pending().clear()

    def pull_domain_events(self) -> List[DomainEvent]:
        """Return the pending events in the order raised and empty the buffer."""
        pending = self._pending()
        events = list(pending)
        pending.clear()
        return events

    @property
    def domain_events(self) -> List[DomainEvent]:
        return list(self._pending())
