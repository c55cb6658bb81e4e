"""Application Services - Use case implementations for ontology history."""

from .axiom_differ import AxiomSetDiffer
from .snapshot_matcher import SnapshotMatcher
from .commit_history_walker import CommitHistoryWalker
from .revision_sequencer import RevisionSequencer, DESCRIPTION_TEMPLATE
from .revision_persistence import RevisionPersistencePipeline, HISTORY_CONTENT_TYPE
from .project_history_handler import ProjectHistoryCommandHandler, root_cause_message

__all__ = [
    # Diff engine
    "AxiomSetDiffer",
    "SnapshotMatcher",
    "CommitHistoryWalker",
    # Revisions
    "RevisionSequencer",
    "DESCRIPTION_TEMPLATE",
    "RevisionPersistencePipeline",
    "HISTORY_CONTENT_TYPE",
    # Orchestration
    "ProjectHistoryCommandHandler",
    "root_cause_message",
]
