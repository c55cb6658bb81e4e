"""
Snapshot Matcher.

Pairs the ontologies of two commits by identity and diffs each pair.

Matching is not symmetric, so it runs in two passes:
1. Every newer snapshot is diffed against its older counterpart, or against
   the empty set when it has none (wholly added ontology).
2. Every older snapshot whose identity was not seen in pass 1 is diffed
   against the empty set (wholly removed ontology).
"""

import logging
from typing import List, Optional, Sequence, Set

from ohb.application.services.axiom_differ import AxiomSetDiffer
from ohb.domain.models.ontology import DocumentIdentity, DocumentSnapshot, ElementChange

logger = logging.getLogger(__name__)


class SnapshotMatcher:
    """Diffs whole-document snapshot lists, one ontology at a time."""

    def __init__(self, differ: Optional[AxiomSetDiffer] = None):
        self._differ = differ or AxiomSetDiffer()

    def match(
        self,
        newer_snapshots: Sequence[DocumentSnapshot],
        older_snapshots: Sequence[DocumentSnapshot],
    ) -> List[ElementChange]:
        """
        Calculate all axiom changes between two commits.

        Args:
            newer_snapshots: Ontologies loaded at the child commit
            older_snapshots: Ontologies loaded at the parent commit

        Returns:
            Changes for matched and added ontologies, then removed ontologies
        """
        if newer_snapshots is None or older_snapshots is None:
            raise ValueError("snapshot lists cannot be None")

        changes: List[ElementChange] = []
        processed: Set[DocumentIdentity] = set()

        for newer in newer_snapshots:
            older = self._find_matching(newer.identity, older_snapshots)
            if older is None:
                logger.debug(f"Ontology {newer.identity} has no previous version, treating as added")
                changes.extend(self._differ.diff(newer.axioms, frozenset(), newer.identity))
            else:
                changes.extend(self._differ.diff(newer.axioms, older.axioms, newer.identity))
            processed.add(newer.identity)

        for older in older_snapshots:
            if older.identity in processed:
                continue
            logger.debug(f"Ontology {older.identity} no longer present, treating as removed")
            changes.extend(self._differ.diff(frozenset(), older.axioms, older.identity))
            # Duplicate identities in the older list are emitted once.
            processed.add(older.identity)

        return changes

    @staticmethod
    def _find_matching(
        identity: DocumentIdentity,
        candidates: Sequence[DocumentSnapshot],
    ) -> Optional[DocumentSnapshot]:
        """First snapshot with the same identity, if any."""
        for candidate in candidates:
            if candidate.identity == identity:
                return candidate
        return None
