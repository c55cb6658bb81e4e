"""
Tests for OHBEventBus.

Tests thread-safety, bounded history, and event handling.
"""

import threading
from datetime import datetime, timedelta
from typing import List

import pytest

from ohb.domain.events import (
    CreateProjectHistoryFailedEvent,
    CreateProjectHistorySucceededEvent,
    ProjectHistoryEvent,
    RepositoryCloneFailedEvent,
    RepositoryCloneSucceededEvent,
)
from ohb.domain.models import BlobLocation, OperationId, ProjectId
from ohb.infrastructure.events import (
    OHBEventBus,
    get_ohb_event_bus,
    reset_ohb_event_bus,
    set_ohb_event_bus,
)


class TestOHBEventBusBasics:
    """Basic event bus operations."""

    def test_create_event_bus(self):
        bus = OHBEventBus()
        assert bus.get_subscriber_count() == 0
        assert bus.max_history == 1000

    def test_subscribe_and_publish(self):
        bus = OHBEventBus()
        received: List = []

        bus.subscribe(RepositoryCloneSucceededEvent, received.append)
        bus.publish(RepositoryCloneSucceededEvent(working_directory="/tmp/clone"))

        assert len(received) == 1
        assert received[0].working_directory == "/tmp/clone"

    def test_type_specific_subscription(self):
        """Subscribers only receive their exact event type."""
        bus = OHBEventBus()
        succeeded: List = []
        failed: List = []

        bus.subscribe(RepositoryCloneSucceededEvent, succeeded.append)
        bus.subscribe(RepositoryCloneFailedEvent, failed.append)

        bus.publish(RepositoryCloneSucceededEvent())
        bus.publish(RepositoryCloneFailedEvent(error_message="nope"))
        bus.publish(CreateProjectHistoryFailedEvent(error_message="nope"))

        assert len(succeeded) == 1
        assert len(failed) == 1

    def test_subscribe_all_receives_everything(self):
        bus = OHBEventBus()
        received: List = []

        bus.subscribe_all(received.append)
        bus.publish(RepositoryCloneSucceededEvent())
        bus.publish(CreateProjectHistorySucceededEvent())

        assert [e.event_type for e in received] == [
            "RepositoryCloneSucceededEvent",
            "CreateProjectHistorySucceededEvent",
        ]
        assert bus.get_subscriber_count() == 1

    def test_unsubscribe(self):
        bus = OHBEventBus()
        received: List = []

        def handler(event):
            received.append(event)

        bus.subscribe(RepositoryCloneSucceededEvent, handler)
        bus.publish(RepositoryCloneSucceededEvent())
        bus.unsubscribe(RepositoryCloneSucceededEvent, handler)
        bus.publish(RepositoryCloneSucceededEvent())

        assert len(received) == 1
        assert bus.get_subscriber_count(RepositoryCloneSucceededEvent) == 0

    def test_unsubscribe_all(self):
        bus = OHBEventBus()
        received: List = []

        def handler(event):
            received.append(event)

        bus.subscribe_all(handler)
        bus.unsubscribe_all(handler)
        bus.publish(RepositoryCloneSucceededEvent())

        assert received == []

    def test_handler_exception_doesnt_break_other_handlers(self):
        bus = OHBEventBus()
        received: List = []

        def failing_handler(event):
            raise ValueError("Intentional failure")

        bus.subscribe(RepositoryCloneSucceededEvent, failing_handler)
        bus.subscribe(RepositoryCloneSucceededEvent, received.append)
        bus.publish(RepositoryCloneSucceededEvent())

        assert len(received) == 1

    def test_handler_may_publish(self):
        """Handlers run outside the lock, so re-entrant publishing works."""
        bus = OHBEventBus()

        def chain(event):
            bus.publish(CreateProjectHistorySucceededEvent())

        bus.subscribe(RepositoryCloneSucceededEvent, chain)
        bus.publish(RepositoryCloneSucceededEvent())

        assert len(bus.get_event_history()) == 2


class TestOHBEventBusHistory:
    """Event history tests."""

    def test_history_bounded(self):
        bus = OHBEventBus(max_history=5)
        for _ in range(12):
            bus.publish(RepositoryCloneSucceededEvent())

        assert len(bus.get_event_history()) == 5

    def test_history_filter_matches_subclasses(self):
        bus = OHBEventBus()
        bus.publish(RepositoryCloneSucceededEvent())
        bus.publish(CreateProjectHistoryFailedEvent(error_message="x"))

        assert len(bus.get_event_history(ProjectHistoryEvent)) == 2
        assert len(bus.get_event_history(RepositoryCloneSucceededEvent)) == 1

    def test_get_history_most_recent_first(self):
        bus = OHBEventBus()
        first = RepositoryCloneSucceededEvent(head_commit="c1")
        second = RepositoryCloneSucceededEvent(head_commit="c2")
        bus.publish_all([first, second])

        assert bus.get_history() == [second, first]
        assert bus.get_history(limit=1) == [second]

    def test_get_history_since(self):
        bus = OHBEventBus()
        old = RepositoryCloneSucceededEvent(timestamp=datetime.now() - timedelta(hours=1))
        new = RepositoryCloneSucceededEvent()
        bus.publish_all([old, new])

        assert bus.get_history(since=datetime.now() - timedelta(minutes=5)) == [new]

    def test_get_operation_events(self):
        bus = OHBEventBus()
        ours, theirs = OperationId.generate(), OperationId.generate()
        bus.publish(RepositoryCloneSucceededEvent(operation_id=ours))
        bus.publish(RepositoryCloneSucceededEvent(operation_id=theirs))
        bus.publish(CreateProjectHistorySucceededEvent(operation_id=ours))

        events = bus.get_operation_events(ours)

        assert [type(e) for e in events] == [RepositoryCloneSucceededEvent, CreateProjectHistorySucceededEvent]

    def test_clear_history(self):
        bus = OHBEventBus()
        bus.publish(RepositoryCloneSucceededEvent())
        bus.clear_history()

        assert bus.get_event_history() == []


class TestOHBEventBusThreadSafety:
    """Concurrent publishing."""

    def test_concurrent_publish(self):
        bus = OHBEventBus(max_history=10_000)
        received: List = []
        lock = threading.Lock()

        def handler(event):
            with lock:
                received.append(event)

        bus.subscribe(RepositoryCloneSucceededEvent, handler)

        def worker():
            for _ in range(100):
                bus.publish(RepositoryCloneSucceededEvent())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(received) == 800
        assert len(bus.get_event_history()) == 800


class TestEventSerialization:
    """Event to_dict payloads."""

    def test_correlation_fields(self):
        operation_id = OperationId.generate()
        event = CreateProjectHistorySucceededEvent(
            operation_id=operation_id,
            project_id=ProjectId("pizza"),
            document_location=BlobLocation("project-history", "h.bin"),
        )

        data = event.to_dict()

        assert data["event_type"] == "CreateProjectHistorySucceededEvent"
        assert data["operation_id"] == str(operation_id)
        assert data["project_id"] == "pizza"
        assert data["document_location"] == {"bucket": "project-history", "name": "h.bin"}
        assert not event.is_failure

    def test_failure_payload(self):
        event = CreateProjectHistoryFailedEvent(failed_stage="clone", error_message="auth")

        assert event.is_failure
        assert event.to_dict()["failed_stage"] == "clone"
        assert event.to_dict()["error_message"] == "auth"


class TestGlobalEventBus:
    """Global instance management."""

    def test_get_returns_singleton(self):
        assert get_ohb_event_bus() is get_ohb_event_bus()

    def test_set_and_reset(self):
        custom = OHBEventBus(max_history=3)
        set_ohb_event_bus(custom)
        assert get_ohb_event_bus() is custom

        reset_ohb_event_bus()
        assert get_ohb_event_bus() is not custom
