"""
FastAPI Dependencies for dependency injection.

The API layer depends on the command handler and the event bus only; both
are held by a process-wide AppState that is initialized once at startup
(or explicitly by tests).
"""

from typing import Optional

from ohb.application.factories import ProjectHistoryHandlerFactory
from ohb.application.services import ProjectHistoryCommandHandler
from ohb.config import OHBConfig, get_config
from ohb.infrastructure.events import OHBEventBus, get_ohb_event_bus


# ═══════════════════════════════════════════════════════════════════════════════
# Application State (Singleton services)
# ═══════════════════════════════════════════════════════════════════════════════

class AppState:
    """
    Application state container.

    Holds singleton instances of services that are shared across requests.
    """

    def __init__(self):
        self._config: Optional[OHBConfig] = None
        self._event_bus: Optional[OHBEventBus] = None
        self._handler: Optional[ProjectHistoryCommandHandler] = None
        self._initialized: bool = False

    def initialize(
        self,
        config: Optional[OHBConfig] = None,
        event_bus: Optional[OHBEventBus] = None,
        handler: Optional[ProjectHistoryCommandHandler] = None,
    ) -> None:
        """
        Initialize application state with services.

        Args:
            config: Configuration (defaults to global config)
            event_bus: Event bus instance
            handler: Pre-built command handler (built from config if omitted)
        """
        self._config = config or get_config()
        self._event_bus = event_bus or get_ohb_event_bus()
        self._handler = handler or ProjectHistoryHandlerFactory.create(
            self._config, event_bus=self._event_bus
        )
        self._initialized = True

    @property
    def config(self) -> OHBConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    @property
    def event_bus(self) -> OHBEventBus:
        """Get the event bus instance."""
        if self._event_bus is None:
            self._event_bus = get_ohb_event_bus()
        return self._event_bus

    @property
    def handler(self) -> ProjectHistoryCommandHandler:
        """Get the command handler, initializing from config on first use."""
        if self._handler is None:
            self.initialize(config=self._config, event_bus=self._event_bus)
        return self._handler

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def shutdown(self, wait: bool = True) -> None:
        if self._handler is not None:
            self._handler.shutdown(wait=wait)


# Global application state
_app_state: Optional[AppState] = None


def get_app_state() -> AppState:
    """Get the global application state."""
    global _app_state
    if _app_state is None:
        _app_state = AppState()
    return _app_state


def set_app_state(state: AppState) -> None:
    """Set the global application state (for testing)."""
    global _app_state
    _app_state = state


def reset_app_state() -> None:
    """Reset the global application state (for testing)."""
    global _app_state
    _app_state = None


# ═══════════════════════════════════════════════════════════════════════════════
# FastAPI Dependencies
# ═══════════════════════════════════════════════════════════════════════════════

def get_event_bus() -> OHBEventBus:
    """FastAPI dependency for event bus."""
    return get_app_state().event_bus


def get_command_handler() -> ProjectHistoryCommandHandler:
    """FastAPI dependency for the project history command handler."""
    return get_app_state().handler
