"""
Domain Events - Lifecycle notifications for project history requests.

These events follow the pattern of a typed publish/subscribe bus.
"""

from .history_events import (
    OHBEvent,
    ProjectHistoryEvent,
    RepositoryCloneSucceededEvent,
    RepositoryCloneFailedEvent,
    ProjectHistoryImportSucceededEvent,
    ProjectHistoryImportFailedEvent,
    ProjectHistoryStoreSucceededEvent,
    ProjectHistoryStoreFailedEvent,
    CreateProjectHistorySucceededEvent,
    CreateProjectHistoryFailedEvent,
    TERMINAL_EVENT_TYPES,
)

__all__ = [
    # Base
    "OHBEvent",
    "ProjectHistoryEvent",
    # Clone stage
    "RepositoryCloneSucceededEvent",
    "RepositoryCloneFailedEvent",
    # Analyze stage
    "ProjectHistoryImportSucceededEvent",
    "ProjectHistoryImportFailedEvent",
    # Persist stage
    "ProjectHistoryStoreSucceededEvent",
    "ProjectHistoryStoreFailedEvent",
    # Terminal
    "CreateProjectHistorySucceededEvent",
    "CreateProjectHistoryFailedEvent",
    "TERMINAL_EVENT_TYPES",
]
