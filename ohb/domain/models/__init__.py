"""Domain Models - Value objects and entities for ontology history."""

from .value_objects import (
    RelativeFilePath,
    OperationId,
    EventId,
    RequestId,
    ProjectId,
    UserId,
    RepositoryCoordinates,
    BlobLocation,
)
from .ontology import (
    Axiom,
    DocumentIdentity,
    DocumentSnapshot,
    ChangeOperation,
    ElementChange,
    CommitMetadata,
    CommitChangeRecord,
)
from .revision import (
    AddAxiomChange,
    RemoveAxiomChange,
    OntologyChange,
    Revision,
)
from .pipeline import (
    PipelineStage,
    PipelineState,
    PipelineStateChange,
    PIPELINE_TRANSITIONS,
    StageOutcome,
    CreateProjectHistoryRequest,
    CreateProjectHistoryResponse,
)

__all__ = [
    # Value objects
    "RelativeFilePath",
    "OperationId",
    "EventId",
    "RequestId",
    "ProjectId",
    "UserId",
    "RepositoryCoordinates",
    "BlobLocation",
    # Ontology
    "Axiom",
    "DocumentIdentity",
    "DocumentSnapshot",
    "ChangeOperation",
    "ElementChange",
    "CommitMetadata",
    "CommitChangeRecord",
    # Revisions
    "AddAxiomChange",
    "RemoveAxiomChange",
    "OntologyChange",
    "Revision",
    # Pipeline
    "PipelineStage",
    "PipelineState",
    "PipelineStateChange",
    "PIPELINE_TRANSITIONS",
    "StageOutcome",
    "CreateProjectHistoryRequest",
    "CreateProjectHistoryResponse",
]
