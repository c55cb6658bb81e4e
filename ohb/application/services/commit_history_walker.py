"""
Commit History Walker.

Walks the commit history of one ontology file from the newest commit
backwards and records the axiom changes each commit introduced.

Flow:
    HEAD ── load ──┐
                   ├─ match(current, previous) → record(HEAD)
    HEAD~1 ─ load ─┘
                   ├─ match(current, previous) → record(HEAD~1)
    ...            │
    initial ───────┴─ match(current, [])       → record(initial)   (genesis)

A commit whose ontology cannot be loaded is skipped: nothing is recorded for
it and its child is compared against the next loadable ancestor instead.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ohb.application.services.snapshot_matcher import SnapshotMatcher
from ohb.domain.exceptions import ComparisonError, DocumentLoadError
from ohb.domain.interfaces.document_loader import IDocumentLoader
from ohb.domain.interfaces.repository_navigation import ICommitNavigator
from ohb.domain.models.ontology import CommitChangeRecord, CommitMetadata, DocumentSnapshot
from ohb.domain.models.value_objects import RelativeFilePath

logger = logging.getLogger(__name__)


class CommitHistoryWalker:
    """
    Builds the per-commit change history of an ontology file.

    Output is ordered newest commit first.
    """

    def __init__(self, loader: IDocumentLoader, matcher: Optional[SnapshotMatcher] = None):
        if loader is None:
            raise ValueError("loader cannot be None")
        self._loader = loader
        self._matcher = matcher or SnapshotMatcher()

    def walk(self, target_path: RelativeFilePath, navigator: ICommitNavigator) -> List[CommitChangeRecord]:
        """
        Analyze the ontology history across all commits reachable from the
        currently checked-out commit.

        Args:
            target_path: Repository-relative path of the root ontology file
            navigator: Initialized navigator positioned at the newest commit

        Returns:
            One CommitChangeRecord per loadable commit, newest first

        Raises:
            ComparisonError: Navigation or any other unexpected failure. No
                partial history is returned.
        """
        if target_path is None:
            raise ValueError("target_path cannot be None")
        if navigator is None:
            raise ValueError("navigator cannot be None")

        logger.info(f"Starting ontology commit history analysis for ontology file: {target_path}")

        records: List[CommitChangeRecord] = []
        try:
            ontology_file = navigator.resolve_path(target_path)

            current_metadata = navigator.get_current_commit_metadata()
            current = self._load(ontology_file, current_metadata)

            while navigator.has_previous_commit():
                navigator.checkout_previous()
                previous_metadata = navigator.get_current_commit_metadata()
                previous = self._load(ontology_file, previous_metadata)
                if previous is None:
                    continue

                if current is not None:
                    changes = self._matcher.match(current, previous)
                    records.append(CommitChangeRecord(changes, current_metadata))

                current, current_metadata = previous, previous_metadata

            if current is not None:
                changes = self._matcher.match(current, [])
                records.append(CommitChangeRecord(changes, current_metadata))
        except Exception as e:
            logger.error(f"Ontology history analysis failed for {target_path}: {e}")
            raise ComparisonError("Failed to analyze ontology commit history") from e

        logger.info(f"Analyzed {len(records)} commits for ontology file: {target_path}")
        return records

    def _load(self, ontology_file: Path, metadata: CommitMetadata) -> Optional[List[DocumentSnapshot]]:
        """Load snapshots at the current checkout, or None if this commit must be skipped."""
        try:
            return self._loader.load_with_imports(ontology_file)
        except DocumentLoadError as e:
            logger.info(f"Skipping commit {metadata.commit_hash} due to ontology load error: {e}")
            return None
