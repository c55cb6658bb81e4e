"""
OHB Event Bus - Thread-safe event bus for project history lifecycle events.

Provides a thread-safe publish-subscribe mechanism for domain events
published by concurrently running import pipelines.

Design Decisions:
- Thread-safe via RLock, since every worker thread publishes
- Bounded history to prevent memory leaks
- Handlers called outside the lock; handler errors are logged, never raised

Usage:
    bus = OHBEventBus()

    # Subscribe to events
    bus.subscribe(CreateProjectHistorySucceededEvent, handle_succeeded)
    bus.subscribe_all(audit_handler)

    # Publish events
    bus.publish(CreateProjectHistorySucceededEvent(operation_id=op_id))

    # Get history
    recent = bus.get_history(limit=10)
    events = bus.get_operation_events(op_id)
"""

from typing import Type, Callable, List, Dict, Optional, Any
from threading import RLock
from datetime import datetime
from collections import deque
import logging

from ohb.domain.events import OHBEvent
from ohb.domain.models.value_objects import OperationId

logger = logging.getLogger(__name__)


class OHBEventBus:
    """
    Thread-safe OHB Event Bus with bounded history.

    Key Features:
    - Thread-safe via RLock (reentrant for nested publishes)
    - Bounded event history (default 1000 events)
    - Type-specific and catch-all subscriptions
    - Per-operation history lookup
    """

    def __init__(self, max_history: int = 1000):
        """
        Initialize OHB Event Bus.

        Args:
            max_history: Maximum events to keep in history
        """
        self._lock = RLock()  # Reentrant for nested publishes
        self._subscribers: Dict[Type, List[Callable[[Any], None]]] = {}
        self._global_subscribers: List[Callable[[Any], None]] = []
        self._event_history: deque = deque(maxlen=max_history)
        self._max_history = max_history

    @property
    def max_history(self) -> int:
        return self._max_history

    # ═══════════════════════════════════════════════════════════════
    # Core Pub/Sub Operations
    # ═══════════════════════════════════════════════════════════════

    def subscribe(
        self,
        event_type: Type[OHBEvent],
        handler: Callable[[OHBEvent], None]
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event class to subscribe to (exact type match)
            handler: Callback function that receives the event
        """
        with self._lock:
            if event_type not in self._subscribers:
                self._subscribers[event_type] = []
            if handler not in self._subscribers[event_type]:
                self._subscribers[event_type].append(handler)

    def subscribe_all(self, handler: Callable[[OHBEvent], None]) -> None:
        """Subscribe to every published event regardless of type."""
        with self._lock:
            if handler not in self._global_subscribers:
                self._global_subscribers.append(handler)

    def unsubscribe(
        self,
        event_type: Type[OHBEvent],
        handler: Callable[[OHBEvent], None]
    ) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event class to unsubscribe from
            handler: The callback to remove
        """
        with self._lock:
            if event_type in self._subscribers:
                try:
                    self._subscribers[event_type].remove(handler)
                except ValueError:
                    pass  # Handler not in list

    def unsubscribe_all(self, handler: Callable[[OHBEvent], None]) -> None:
        """Remove a catch-all subscription."""
        with self._lock:
            try:
                self._global_subscribers.remove(handler)
            except ValueError:
                pass

    def publish(self, event: OHBEvent) -> None:
        """
        Publish an event to all subscribers.

        Events are stored in history and delivered synchronously to subscribers.
        Exceptions in handlers are logged but don't prevent other handlers.

        Args:
            event: The event instance to publish
        """
        with self._lock:
            self._event_history.append(event)

            event_type = type(event)
            # Copy to avoid modification during iteration
            handlers = self._subscribers.get(event_type, [])[:] + self._global_subscribers[:]

        # Call handlers outside lock to prevent deadlock
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type.__name__}: {e}")

    def publish_all(self, events: List[OHBEvent]) -> None:
        """
        Publish multiple events in order.

        Args:
            events: List of events to publish
        """
        for event in events:
            self.publish(event)

    # ═══════════════════════════════════════════════════════════════
    # History and Query Operations
    # ═══════════════════════════════════════════════════════════════

    def get_event_history(
        self,
        event_type: Optional[Type[OHBEvent]] = None
    ) -> List[OHBEvent]:
        """
        Get event history, optionally filtered by type.

        Args:
            event_type: Optional filter for specific event type (subclasses match)

        Returns:
            List of events (oldest first)
        """
        with self._lock:
            events = list(self._event_history)

        if event_type is not None:
            events = [e for e in events if isinstance(e, event_type)]

        return events

    def get_history(
        self,
        event_type: Optional[Type[OHBEvent]] = None,
        since: Optional[datetime] = None,
        limit: int = 100
    ) -> List[OHBEvent]:
        """
        Get event history with optional filtering.

        Args:
            event_type: Filter by event type
            since: Filter events after this timestamp
            limit: Maximum number of events to return

        Returns:
            List of events (most recent first)
        """
        events = self.get_event_history(event_type)

        if since is not None:
            events = [e for e in events if e.timestamp >= since]

        return list(reversed(events[-limit:]))

    def get_operation_events(self, operation_id: OperationId) -> List[OHBEvent]:
        """All retained events of one operation, oldest first."""
        return [
            e for e in self.get_event_history()
            if getattr(e, "operation_id", None) == operation_id
        ]

    def clear_history(self) -> None:
        """Clear all event history."""
        with self._lock:
            self._event_history.clear()

    def get_subscriber_count(
        self,
        event_type: Optional[Type[OHBEvent]] = None
    ) -> int:
        """
        Get count of subscribers.

        Args:
            event_type: Count for specific type, or total (including catch-all) if None

        Returns:
            Number of subscribers
        """
        with self._lock:
            if event_type is not None:
                return len(self._subscribers.get(event_type, []))
            return sum(len(h) for h in self._subscribers.values()) + len(self._global_subscribers)


# ═══════════════════════════════════════════════════════════════
# Global Instance Management
# ═══════════════════════════════════════════════════════════════

_global_ohb_event_bus: Optional[OHBEventBus] = None


def get_ohb_event_bus() -> OHBEventBus:
    """
    Get global OHB event bus instance.

    Creates a new instance on first call.
    """
    global _global_ohb_event_bus
    if _global_ohb_event_bus is None:
        _global_ohb_event_bus = OHBEventBus()
    return _global_ohb_event_bus


def set_ohb_event_bus(bus: OHBEventBus) -> None:
    """
    Set global OHB event bus instance.

    Useful for testing with custom bus configurations.
    """
    global _global_ohb_event_bus
    _global_ohb_event_bus = bus


def reset_ohb_event_bus() -> None:
    """
    Reset global event bus to None.

    Next call to get_ohb_event_bus() will create a new instance.
    """
    global _global_ohb_event_bus
    _global_ohb_event_bus = None
