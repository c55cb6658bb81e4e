"""
Ontology History Builder (OHB) - Git history to ontology revision history.

A DDD-based pipeline that turns the commit history of an ontology file into
a numbered, forward-chronological revision sequence:
- Commit History Walker: newest-to-oldest walk with per-commit diffs
- Snapshot Matcher / Axiom Differ: per-ontology structural differences
- Revision Sequencer: reverse and number into revisions
- Persistence Pipeline: stream revisions into one stored document
- Command Handler: asynchronous clone → analyze → persist with lifecycle events

Architecture follows:
- Domain-Driven Design
- Interface-based abstractions (ports) for git, parsing and storage
- Thread-safe event bus for lifecycle notifications
"""

__version__ = "0.1.0"

# Domain Models
from ohb.domain.models import (
    RelativeFilePath,
    OperationId,
    ProjectId,
    UserId,
    RepositoryCoordinates,
    BlobLocation,
    Axiom,
    DocumentIdentity,
    DocumentSnapshot,
    ElementChange,
    CommitMetadata,
    CommitChangeRecord,
    Revision,
    PipelineState,
    CreateProjectHistoryRequest,
    CreateProjectHistoryResponse,
)

# Domain Exceptions
from ohb.domain.exceptions import OHBError

# Application Services
from ohb.application.services import (
    AxiomSetDiffer,
    SnapshotMatcher,
    CommitHistoryWalker,
    RevisionSequencer,
    RevisionPersistencePipeline,
    ProjectHistoryCommandHandler,
)

# Configuration
from ohb.config import OHBConfig

__all__ = [
    "__version__",
    # Domain
    "RelativeFilePath",
    "OperationId",
    "ProjectId",
    "UserId",
    "RepositoryCoordinates",
    "BlobLocation",
    "Axiom",
    "DocumentIdentity",
    "DocumentSnapshot",
    "ElementChange",
    "CommitMetadata",
    "CommitChangeRecord",
    "Revision",
    "PipelineState",
    "CreateProjectHistoryRequest",
    "CreateProjectHistoryResponse",
    "OHBError",
    # Application
    "AxiomSetDiffer",
    "SnapshotMatcher",
    "CommitHistoryWalker",
    "RevisionSequencer",
    "RevisionPersistencePipeline",
    "ProjectHistoryCommandHandler",
    # Config
    "OHBConfig",
]
