"""Unit tests for the in-process event bus and after-commit publication."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

import pytest

from shared.domain.events import DomainEvent, DomainEventMixin
from shared.infrastructure.bus import (
    InMemoryEventBus,
    flush_domain_events,
    publish_on_commit,
)

pytestmark = pytest.mark.unit


@dataclass(frozen=True)
class Pinged(DomainEvent):
    label: str = ""


@dataclass(frozen=True)
class Ponged(DomainEvent):
    pass


class Recorder:
    def __init__(self) -> None:
        self.events = []

    def handle(self, event) -> None:
        self.events.append(event)


class Aggregate(DomainEventMixin):
    pass


class TestInMemoryEventBus:
    def test_publishes_only_to_subscribers_of_event_type(self):
        bus = InMemoryEventBus()
        pings, pongs = Recorder(), Recorder()
        bus.subscribe(Pinged, pings)
        bus.subscribe(Ponged, pongs)

        event = Pinged(aggregate_id=uuid4(), label="a")
        bus.publish(event)

        assert pings.events == [event]
        assert pongs.events == []

    def test_subscribing_twice_delivers_once(self):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(Pinged, recorder)
        bus.subscribe(Pinged, recorder)
        bus.publish(Pinged(aggregate_id=uuid4()))
        assert len(recorder.events) == 1

    def test_event_without_handlers_is_dropped(self):
        InMemoryEventBus().publish(Ponged(aggregate_id=uuid4()))


class TestPublishOnCommit:
    def test_events_wait_for_commit(self, django_capture_on_commit_callbacks):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(Pinged, recorder)
        events = [Pinged(aggregate_id=uuid4(), label=str(i)) for i in range(2)]

        with django_capture_on_commit_callbacks() as callbacks:
            assert publish_on_commit(events, bus) == 2
            assert recorder.events == []

        for callback in callbacks:
            callback()
        assert [e.label for e in recorder.events] == ["0", "1"]

    def test_flush_moves_and_clears_aggregate_events(self, django_capture_on_commit_callbacks):
        bus = InMemoryEventBus()
        recorder = Recorder()
        bus.subscribe(Pinged, recorder)
        aggregate = Aggregate()
        aggregate.add_domain_event(Pinged(aggregate_id=uuid4()))

        with django_capture_on_commit_callbacks(execute=True):
            assert flush_domain_events(aggregate, bus) == 1

        assert aggregate.domain_events == []
        assert len(recorder.events) == 1
