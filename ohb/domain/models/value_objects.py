"""
Project History Value Objects.

Immutable value objects for the ontology history domain.

Design Principles:
- Immutable: All value objects are frozen dataclasses
- Type Safety: Distinct ID types prevent operation/event/request mix-ups
- Self-Validating: Validation in __post_init__, invalid input fails construction

Value Objects:
- RelativeFilePath: Safe repository-relative path
- OperationId / EventId / RequestId: UUID correlation identifiers
- ProjectId / UserId: Opaque platform identifiers
- RepositoryCoordinates: Repository URL + optional branch
- BlobLocation: Bucket + object name handle for a stored artifact
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any, Dict, Optional

from ohb.domain.exceptions import InvalidFilePathError, InvalidIdentifierError


_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


@dataclass(frozen=True)
class RelativeFilePath:
    """
    Repository-relative file path.

    Examples of valid paths:
        "ontology.owl"
        "src/ontology.owl"
        "data/models/pizza.ttl"
    """
    value: str

    def __post_init__(self):
        if self.value is None:
            raise InvalidFilePathError("File path cannot be null")
        if not isinstance(self.value, str):
            raise InvalidFilePathError(f"File path must be a string, got {type(self.value).__name__}")
        if not self.value.strip():
            raise InvalidFilePathError("File path cannot be empty")
        if self.value.startswith("/") or self.value.startswith("\\") or _DRIVE_PREFIX.match(self.value):
            raise InvalidFilePathError("File path must be relative, not absolute")
        if ".." in self.value:
            raise InvalidFilePathError("File path cannot contain path traversal (..)")
        if "\\" in self.value:
            raise InvalidFilePathError("File path must use forward slashes (/)")

    @property
    def file_name(self) -> str:
        """Last component of the path."""
        return PurePosixPath(self.value).name

    @property
    def directory(self) -> str:
        """All components except the last, or empty string for a root file."""
        parent = str(PurePosixPath(self.value).parent)
        return "" if parent == "." else parent

    def as_path(self) -> PurePosixPath:
        return PurePosixPath(self.value)

    def as_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class _UuidIdentifier:
    """Shared validation for UUID-valued identifiers."""
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise InvalidIdentifierError(
                f"{type(self).__name__} value must be string, got {type(self.value).__name__}"
            )
        try:
            uuid.UUID(self.value)
        except ValueError:
            raise InvalidIdentifierError(f"{type(self).__name__} must be a UUID: {self.value}")

    @classmethod
    def generate(cls):
        return cls(value=str(uuid.uuid4()))

    @property
    def short(self) -> str:
        """Short representation (first 8 characters)."""
        return self.value[:8]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OperationId(_UuidIdentifier):
    """Correlates every event belonging to one processing request."""


@dataclass(frozen=True)
class EventId(_UuidIdentifier):
    """Identifies one emitted lifecycle event."""


@dataclass(frozen=True)
class RequestId(_UuidIdentifier):
    """Caller-supplied identifier of an inbound request."""


@dataclass(frozen=True)
class _NamedIdentifier:
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise InvalidIdentifierError(f"{type(self).__name__} cannot be empty")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProjectId(_NamedIdentifier):
    """Target project on the document-management platform."""


@dataclass(frozen=True)
class UserId(_NamedIdentifier):
    """Platform user (also used as revision author)."""


@dataclass(frozen=True)
class RepositoryCoordinates:
    """
    Location of a git repository and the branch to analyze.

    Attributes:
        repository_url: Clone URL (https, ssh, or local path)
        branch: Branch name, None for the remote's default branch
    """
    repository_url: str
    branch: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.repository_url, str) or not self.repository_url.strip():
            raise InvalidIdentifierError("Repository URL cannot be empty")

    @property
    def web_url(self) -> str:
        """Repository URL usable for commit links (no trailing .git or slash)."""
        url = self.repository_url.rstrip("/")
        if url.endswith(".git"):
            url = url[: -len(".git")]
        return url

    def to_dict(self) -> Dict[str, Any]:
        return {"repository_url": self.repository_url, "branch": self.branch}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepositoryCoordinates":
        return cls(repository_url=data["repository_url"], branch=data.get("branch"))


@dataclass(frozen=True)
class BlobLocation:
    """Opaque handle to a stored artifact."""
    bucket: str
    name: str

    OBJECT_NAME_PREFIX = "project-history-"
    OBJECT_NAME_SUFFIX = ".bin"

    @classmethod
    def generate(cls, bucket: str) -> "BlobLocation":
        """New location with a unique ``project-history-<uuid>.bin`` object name."""
        return cls(
            bucket=bucket,
            name=f"{cls.OBJECT_NAME_PREFIX}{uuid.uuid4()}{cls.OBJECT_NAME_SUFFIX}",
        )

    def to_dict(self) -> Dict[str, str]:
        return {"bucket": self.bucket, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "BlobLocation":
        return cls(bucket=data["bucket"], name=data["name"])

    def __str__(self) -> str:
        return f"{self.bucket}/{self.name}"


__all__ = [
    "RelativeFilePath",
    "OperationId",
    "EventId",
    "RequestId",
    "ProjectId",
    "UserId",
    "RepositoryCoordinates",
    "BlobLocation",
]
