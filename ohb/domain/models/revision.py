"""
Revision domain models.

A Revision is the platform-importable form of one commit: a chronologically
numbered list of generic ontology changes plus author, timestamp and
description.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Tuple, Union

from ohb.domain.models.ontology import Axiom, DocumentIdentity


@dataclass(frozen=True)
class AddAxiomChange:
    """Generic "add axiom to ontology" change."""
    ontology: DocumentIdentity
    axiom: Axiom

    change_type: ClassVar[str] = "AddAxiom"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "change_type": self.change_type,
            "ontology": self.ontology.to_dict(),
            "axiom": self.axiom.to_dict(),
        }


@dataclass(frozen=True)
class RemoveAxiomChange:
    """Generic "remove axiom from ontology" change."""
    ontology: DocumentIdentity
    axiom: Axiom

    change_type: ClassVar[str] = "RemoveAxiom"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "change_type": self.change_type,
            "ontology": self.ontology.to_dict(),
            "axiom": self.axiom.to_dict(),
        }


OntologyChange = Union[AddAxiomChange, RemoveAxiomChange]

_CHANGE_TYPES = {
    AddAxiomChange.change_type: AddAxiomChange,
    RemoveAxiomChange.change_type: RemoveAxiomChange,
}


def ontology_change_from_dict(data: Dict[str, Any]) -> OntologyChange:
    """Deserialize an AddAxiomChange / RemoveAxiomChange by its change_type."""
    change_cls = _CHANGE_TYPES.get(data.get("change_type"))
    if change_cls is None:
        raise ValueError(f"Unknown change type: {data.get('change_type')!r}")
    return change_cls(
        ontology=DocumentIdentity.from_dict(data["ontology"]),
        axiom=Axiom.from_dict(data["axiom"]),
    )


@dataclass(frozen=True)
class Revision:
    """
    One numbered revision of the project history.

    Attributes:
        author_id: Committer username
        revision_number: 1-based, strictly increasing within one history
        changes: Ordered generic changes
        timestamp_ms: Commit time as Unix epoch milliseconds
        description: Commit hash, link and original message
    """
    author_id: str
    revision_number: int
    changes: Tuple[OntologyChange, ...]
    timestamp_ms: int
    description: str

    def __post_init__(self):
        if self.revision_number < 1:
            raise ValueError(f"Revision number must be >= 1, got {self.revision_number}")
        object.__setattr__(self, "changes", tuple(self.changes))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "author_id": self.author_id,
            "revision_number": self.revision_number,
            "changes": [change.to_dict() for change in self.changes],
            "timestamp_ms": self.timestamp_ms,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Revision":
        return cls(
            author_id=data["author_id"],
            revision_number=data["revision_number"],
            changes=tuple(ontology_change_from_dict(c) for c in data["changes"]),
            timestamp_ms=data["timestamp_ms"],
            description=data["description"],
        )


__all__ = [
    "AddAxiomChange",
    "RemoveAxiomChange",
    "OntologyChange",
    "ontology_change_from_dict",
    "Revision",
]
