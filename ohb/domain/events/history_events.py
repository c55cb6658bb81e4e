"""
Project history lifecycle events.

Published by the command handler after each pipeline stage (one success or
failure event per stage) and once more when the request terminates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ohb.domain.models.value_objects import (
    BlobLocation,
    EventId,
    OperationId,
    ProjectId,
    RepositoryCoordinates,
    RequestId,
)


@dataclass
class OHBEvent:
    """Base class for all OHB domain events."""
    event_id: EventId = field(default_factory=EventId.generate)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__


@dataclass
class ProjectHistoryEvent(OHBEvent):
    """Fields shared by every event of one processing request."""
    operation_id: Optional[OperationId] = None
    request_id: Optional[RequestId] = None
    project_id: Optional[ProjectId] = None
    repository_coordinates: Optional[RepositoryCoordinates] = None

    @property
    def is_failure(self) -> bool:
        return getattr(self, "error_message", None) is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "event_type": self.event_type,
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "operation_id": str(self.operation_id) if self.operation_id else None,
            "request_id": str(self.request_id) if self.request_id else None,
            "project_id": str(self.project_id) if self.project_id else None,
            "repository_coordinates": (
                self.repository_coordinates.to_dict() if self.repository_coordinates else None
            ),
        }
        data.update(self._payload())
        return data

    def _payload(self) -> Dict[str, Any]:
        return {}


# ═══════════════════════════════════════════════════════════════
# Clone stage
# ═══════════════════════════════════════════════════════════════


@dataclass
class RepositoryCloneSucceededEvent(ProjectHistoryEvent):
    """Published when the working copy has been cloned and checked out."""
    working_directory: str = ""
    head_commit: Optional[str] = None

    def _payload(self) -> Dict[str, Any]:
        return {"working_directory": self.working_directory, "head_commit": self.head_commit}


@dataclass
class RepositoryCloneFailedEvent(ProjectHistoryEvent):
    """Published when the repository cannot be cloned."""
    error_message: str = ""

    def _payload(self) -> Dict[str, Any]:
        return {"error_message": self.error_message}


# ═══════════════════════════════════════════════════════════════
# Analyze stage
# ═══════════════════════════════════════════════════════════════


@dataclass
class ProjectHistoryImportSucceededEvent(ProjectHistoryEvent):
    """Published when the commit history has been turned into revisions."""
    target_file_path: str = ""
    revision_count: int = 0

    def _payload(self) -> Dict[str, Any]:
        return {"target_file_path": self.target_file_path, "revision_count": self.revision_count}


@dataclass
class ProjectHistoryImportFailedEvent(ProjectHistoryEvent):
    """Published when walking or diffing the history fails."""
    target_file_path: str = ""
    error_message: str = ""

    def _payload(self) -> Dict[str, Any]:
        return {"target_file_path": self.target_file_path, "error_message": self.error_message}


# ═══════════════════════════════════════════════════════════════
# Persist stage
# ═══════════════════════════════════════════════════════════════


@dataclass
class ProjectHistoryStoreSucceededEvent(ProjectHistoryEvent):
    """Published when the revision stream has been uploaded."""
    document_location: Optional[BlobLocation] = None

    def _payload(self) -> Dict[str, Any]:
        return {
            "document_location": self.document_location.to_dict() if self.document_location else None
        }


@dataclass
class ProjectHistoryStoreFailedEvent(ProjectHistoryEvent):
    """Published when serialization or upload fails."""
    error_message: str = ""

    def _payload(self) -> Dict[str, Any]:
        return {"error_message": self.error_message}


# ═══════════════════════════════════════════════════════════════
# Terminal
# ═══════════════════════════════════════════════════════════════


@dataclass
class CreateProjectHistorySucceededEvent(ProjectHistoryEvent):
    """Terminal event: every stage succeeded."""
    document_location: Optional[BlobLocation] = None

    def _payload(self) -> Dict[str, Any]:
        return {
            "document_location": self.document_location.to_dict() if self.document_location else None
        }


@dataclass
class CreateProjectHistoryFailedEvent(ProjectHistoryEvent):
    """Terminal event: a stage failed (or the request was never scheduled)."""
    failed_stage: Optional[str] = None
    error_message: str = ""

    def _payload(self) -> Dict[str, Any]:
        return {"failed_stage": self.failed_stage, "error_message": self.error_message}


TERMINAL_EVENT_TYPES = (CreateProjectHistorySucceededEvent, CreateProjectHistoryFailedEvent)
