"""Event infrastructure - thread-safe event bus."""

from .ohb_event_bus import (
    OHBEventBus,
    get_ohb_event_bus,
    set_ohb_event_bus,
    reset_ohb_event_bus,
)

__all__ = [
    "OHBEventBus",
    "get_ohb_event_bus",
    "set_ohb_event_bus",
    "reset_ohb_event_bus",
]
