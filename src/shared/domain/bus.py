"""Domain bus interfaces for in-process event handling."""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)

RealtimeHandler = Callable[[Dict[str, Any]], None]


class IEventHandler(Protocol, Generic[E]):
    """Handler interface for domain events."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    """Event bus interface."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...


class IRealtimeBus(Protocol):
    """Name-keyed, fire-and-forget notification channel for connected clients.

    Delivery is at-most-once: nothing in the core may depend on a
    message being received.  Clients that miss messages re-fetch state.
    """

    def publish(self, event_name: str, payload: Dict[str, Any]) -> None: ...

    def subscribe(
        self, event_name: str, handler: RealtimeHandler
    ) -> Callable[[], None]: ...
