"""
Revision Sequencer.

Turns the walker's newest-first commit records into the oldest-first,
1-based numbered revision sequence the platform imports.

Ordering:
    Input:  [newest_commit, middle_commit, oldest_commit]
    Output: [revision 1 (oldest), revision 2 (middle), revision 3 (newest)]

Revision numbers come from a counter local to each sequence() call, so two
histories sequenced concurrently never share numbers.
"""

import logging
from typing import List, Sequence

from ohb.domain.models.ontology import ChangeOperation, CommitChangeRecord, CommitMetadata, ElementChange
from ohb.domain.models.revision import AddAxiomChange, OntologyChange, RemoveAxiomChange, Revision
from ohb.domain.models.value_objects import RepositoryCoordinates

logger = logging.getLogger(__name__)

DESCRIPTION_TEMPLATE = "**Commit** [{commit_hash}]({commit_link}):\n{commit_message}\n"


class RevisionSequencer:
    """Converts commit change records into numbered revisions."""

    def sequence(
        self,
        records: Sequence[CommitChangeRecord],
        repository_url: str = "",
    ) -> List[Revision]:
        """
        Reverse and number a newest-first record list.

        Args:
            records: Commit change records, newest first (not modified)
            repository_url: Repository URL used to build commit links

        Returns:
            Revisions, oldest first, numbered 1..N
        """
        if records is None:
            raise ValueError("records cannot be None")

        web_url = RepositoryCoordinates(repository_url).web_url if repository_url else ""

        revisions: List[Revision] = []
        revision_number = 1
        for record in reversed(list(records)):
            revisions.append(self._convert(record, revision_number, web_url))
            revision_number += 1

        logger.info(f"Sequenced {len(revisions)} revisions")
        return revisions

    def _convert(self, record: CommitChangeRecord, revision_number: int, web_url: str) -> Revision:
        metadata = record.commit_metadata
        return Revision(
            author_id=metadata.committer_username,
            revision_number=revision_number,
            changes=tuple(self._to_ontology_change(c) for c in record.element_changes),
            timestamp_ms=metadata.timestamp_ms,
            description=self._describe(metadata, web_url),
        )

    @staticmethod
    def _to_ontology_change(change: ElementChange) -> OntologyChange:
        if change.operation == ChangeOperation.ADD:
            return AddAxiomChange(ontology=change.owner, axiom=change.axiom)
        if change.operation == ChangeOperation.REMOVE:
            return RemoveAxiomChange(ontology=change.owner, axiom=change.axiom)
        raise ValueError(f"Unsupported change operation: {change.operation}")

    @staticmethod
    def _describe(metadata: CommitMetadata, web_url: str) -> str:
        commit_link = f"{web_url}/commit/{metadata.commit_hash}" if web_url else metadata.commit_hash
        return DESCRIPTION_TEMPLATE.format(
            commit_hash=metadata.commit_hash,
            commit_link=commit_link,
            commit_message=metadata.commit_message,
        )
