"""
Ontology snapshot and change domain models.

Value objects describing the state of one ontology at one commit and the
structural changes between two such states.

- Axiom: one atomic statement, compared structurally
- DocumentIdentity: key distinguishing one ontology from another in an import graph
- DocumentSnapshot: identity + axiom set at one commit
- ElementChange: ADD/REMOVE of one axiom, tied to its owning ontology
- CommitMetadata / CommitChangeRecord: all changes introduced by one commit
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


@dataclass(frozen=True, order=True)
class Axiom:
    """
    One atomic structural statement.

    Terms are held in N-Triples form, so two axioms are equal iff their
    serialized structure is equal.
    """
    subject: str
    predicate: str
    object: str

    @property
    def ntriples(self) -> str:
        return f"{self.subject} {self.predicate} {self.object} ."

    def to_dict(self) -> Dict[str, str]:
        return {"subject": self.subject, "predicate": self.predicate, "object": self.object}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Axiom":
        return cls(subject=data["subject"], predicate=data["predicate"], object=data["object"])

    def __str__(self) -> str:
        return self.ntriples


@dataclass(frozen=True)
class DocumentIdentity:
    """
    Ontology identity (ontology IRI + optional version IRI).

    Both are None for an anonymous ontology.
    """
    ontology_iri: Optional[str] = None
    version_iri: Optional[str] = None

    @property
    def is_anonymous(self) -> bool:
        return self.ontology_iri is None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"ontology_iri": self.ontology_iri, "version_iri": self.version_iri}

    @classmethod
    def from_dict(cls, data: Dict[str, Optional[str]]) -> "DocumentIdentity":
        return cls(ontology_iri=data.get("ontology_iri"), version_iri=data.get("version_iri"))

    def __str__(self) -> str:
        if self.is_anonymous:
            return "<anonymous>"
        if self.version_iri:
            return f"<{self.ontology_iri}> <{self.version_iri}>"
        return f"<{self.ontology_iri}>"


@dataclass(frozen=True)
class DocumentSnapshot:
    """State of one ontology at one commit."""
    identity: DocumentIdentity
    axioms: FrozenSet[Axiom] = field(default_factory=frozenset)

    def __post_init__(self):
        if not isinstance(self.axioms, frozenset):
            object.__setattr__(self, "axioms", frozenset(self.axioms))

    @classmethod
    def empty(cls, identity: Optional[DocumentIdentity] = None) -> "DocumentSnapshot":
        return cls(identity=identity or DocumentIdentity())

    def __len__(self) -> int:
        return len(self.axioms)


class ChangeOperation(Enum):
    """Direction of an axiom change."""
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class ElementChange:
    """Addition or removal of one axiom in one ontology."""
    operation: ChangeOperation
    axiom: Axiom
    owner: DocumentIdentity

    @classmethod
    def add(cls, axiom: Axiom, owner: DocumentIdentity) -> "ElementChange":
        return cls(operation=ChangeOperation.ADD, axiom=axiom, owner=owner)

    @classmethod
    def remove(cls, axiom: Axiom, owner: DocumentIdentity) -> "ElementChange":
        return cls(operation=ChangeOperation.REMOVE, axiom=axiom, owner=owner)

    @property
    def is_addition(self) -> bool:
        return self.operation == ChangeOperation.ADD


@dataclass(frozen=True)
class CommitMetadata:
    """Commit information read from the repository."""
    commit_hash: str
    committer_username: str
    commit_message: str
    commit_timestamp: datetime

    def __post_init__(self):
        if self.commit_timestamp.tzinfo is None:
            object.__setattr__(
                self, "commit_timestamp", self.commit_timestamp.replace(tzinfo=timezone.utc)
            )

    @property
    def short_hash(self) -> str:
        return self.commit_hash[:8]

    @property
    def timestamp_ms(self) -> int:
        """Commit timestamp as Unix epoch milliseconds."""
        return int(self.commit_timestamp.timestamp() * 1000)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commit_hash": self.commit_hash,
            "committer_username": self.committer_username,
            "commit_message": self.commit_message,
            "commit_timestamp": self.commit_timestamp.isoformat(),
        }


@dataclass(frozen=True)
class CommitChangeRecord:
    """
    All axiom changes introduced by one commit.

    The change list is copied into a tuple on construction so the record
    cannot be altered through the caller's list.
    """
    element_changes: Tuple[ElementChange, ...]
    commit_metadata: CommitMetadata

    def __post_init__(self):
        if self.element_changes is None:
            raise ValueError("element_changes cannot be None")
        if self.commit_metadata is None:
            raise ValueError("commit_metadata cannot be None")
        object.__setattr__(self, "element_changes", tuple(self.element_changes))

    @property
    def additions(self) -> Tuple[ElementChange, ...]:
        return tuple(c for c in self.element_changes if c.is_addition)

    @property
    def removals(self) -> Tuple[ElementChange, ...]:
        return tuple(c for c in self.element_changes if not c.is_addition)

    def __len__(self) -> int:
        return len(self.element_changes)


__all__ = [
    "Axiom",
    "DocumentIdentity",
    "DocumentSnapshot",
    "ChangeOperation",
    "ElementChange",
    "CommitMetadata",
    "CommitChangeRecord",
]
