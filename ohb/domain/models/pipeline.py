"""
Project history pipeline models.

Request/response messages for the command boundary, the per-request state
machine, and the tagged per-stage result passed between stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from ohb.domain.models.value_objects import (
    OperationId,
    ProjectId,
    RelativeFilePath,
    RepositoryCoordinates,
    RequestId,
)

T = TypeVar("T")


class PipelineStage(Enum):
    """The three sequential stages of one request."""
    CLONE = "clone"
    ANALYZE = "analyze"
    PERSIST = "persist"


class PipelineState(Enum):
    """Per-request processing state."""
    RECEIVED = "received"
    CLONING = "cloning"
    CLONED = "cloned"
    CLONE_FAILED = "clone_failed"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    ANALYZE_FAILED = "analyze_failed"
    PERSISTING = "persisting"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.SUCCEEDED, PipelineState.FAILED)


# Allowed transitions; anything else is a programming error in the handler.
PIPELINE_TRANSITIONS: Dict[PipelineState, frozenset] = {
    PipelineState.RECEIVED: frozenset({PipelineState.CLONING, PipelineState.FAILED}),
    PipelineState.CLONING: frozenset({PipelineState.CLONED, PipelineState.CLONE_FAILED}),
    PipelineState.CLONED: frozenset({PipelineState.ANALYZING}),
    PipelineState.CLONE_FAILED: frozenset({PipelineState.FAILED}),
    PipelineState.ANALYZING: frozenset({PipelineState.ANALYZED, PipelineState.ANALYZE_FAILED}),
    PipelineState.ANALYZED: frozenset({PipelineState.PERSISTING}),
    PipelineState.ANALYZE_FAILED: frozenset({PipelineState.FAILED}),
    PipelineState.PERSISTING: frozenset({PipelineState.PERSISTED, PipelineState.PERSIST_FAILED}),
    PipelineState.PERSISTED: frozenset({PipelineState.SUCCEEDED}),
    PipelineState.PERSIST_FAILED: frozenset({PipelineState.FAILED}),
    PipelineState.SUCCEEDED: frozenset(),
    PipelineState.FAILED: frozenset(),
}


@dataclass(frozen=True)
class PipelineStateChange:
    """One entry of an operation's state history."""
    state: PipelineState
    changed_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {"state": self.state.value, "changed_at": self.changed_at.isoformat()}


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """
    Tagged result of one pipeline stage.

    Exactly one of value / error is meaningful, selected by is_success.
    """
    stage: PipelineStage
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, stage: PipelineStage, value: T) -> "StageOutcome[T]":
        return cls(stage=stage, value=value)

    @classmethod
    def failure(cls, stage: PipelineStage, error: BaseException) -> "StageOutcome[T]":
        return cls(stage=stage, error=error)

    @property
    def is_success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CreateProjectHistoryRequest:
    """Inbound request to build the history of one ontology file."""
    project_id: ProjectId
    repository_coordinates: RepositoryCoordinates
    target_file_path: RelativeFilePath
    request_id: RequestId = field(default_factory=RequestId.generate)

    CHANNEL = "ohb.CreateProjectHistoryFromRepository"


@dataclass(frozen=True)
class CreateProjectHistoryResponse:
    """Synchronous acknowledgement, returned before any stage runs."""
    project_id: ProjectId
    operation_id: OperationId
    repository_coordinates: RepositoryCoordinates

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": str(self.project_id),
            "operation_id": str(self.operation_id),
            "repository_coordinates": self.repository_coordinates.to_dict(),
        }


__all__ = [
    "PipelineStage",
    "PipelineState",
    "PIPELINE_TRANSITIONS",
    "PipelineStateChange",
    "StageOutcome",
    "CreateProjectHistoryRequest",
    "CreateProjectHistoryResponse",
]
