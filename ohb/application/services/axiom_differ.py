"""
Axiom Set Differ.

Computes the structural difference between two axiom sets belonging to the
same ontology.
"""

import logging
from typing import Iterable, List

from ohb.domain.models.ontology import Axiom, DocumentIdentity, ElementChange

logger = logging.getLogger(__name__)


class AxiomSetDiffer:
    """
    Set difference over axioms.

    added = newer - older, removed = older - newer. Additions are emitted
    before removals, each group sorted by N-Triples form.
    """

    def diff(
        self,
        newer: Iterable[Axiom],
        older: Iterable[Axiom],
        owner: DocumentIdentity,
    ) -> List[ElementChange]:
        """
        Calculate the changes that turn ``older`` into ``newer``.

        Args:
            newer: Axioms of the newer (child commit) ontology
            older: Axioms of the older (parent commit) ontology
            owner: Identity of the ontology both sets belong to

        Returns:
            ADD changes for added axioms followed by REMOVE changes for removed ones

        Raises:
            ValueError: Any argument is None
        """
        if newer is None:
            raise ValueError("newer axioms cannot be None")
        if older is None:
            raise ValueError("older axioms cannot be None")
        if owner is None:
            raise ValueError("owner cannot be None")

        newer_set = newer if isinstance(newer, (set, frozenset)) else set(newer)
        older_set = older if isinstance(older, (set, frozenset)) else set(older)

        added = sorted(newer_set - older_set)
        removed = sorted(older_set - newer_set)

        changes = [ElementChange.add(axiom, owner) for axiom in added]
        changes.extend(ElementChange.remove(axiom, owner) for axiom in removed)

        logger.info(
            f"Found {len(added)} added axioms and {len(removed)} removed axioms for ontology {owner}"
        )
        return changes
