"""
Document Loader Interface.

Loads an ontology file and its transitively imported ontologies into
DocumentSnapshots.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ohb.domain.models.ontology import DocumentSnapshot


class IDocumentLoader(ABC):
    """Parses ontology documents into snapshots."""

    @abstractmethod
    def load_with_imports(self, path: Path) -> List[DocumentSnapshot]:
        """
        Load the root ontology and everything it imports.

        Args:
            path: Absolute path of the root ontology file

        Returns:
            Root snapshot first, then imported snapshots. Imports that cannot
            be resolved are skipped silently.

        Raises:
            DocumentLoadError: Root file missing or unparsable
        """
        pass

    @abstractmethod
    def create_empty_snapshot(self) -> DocumentSnapshot:
        """Snapshot with no identity and no axioms."""
        pass
