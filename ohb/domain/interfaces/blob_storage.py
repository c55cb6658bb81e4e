"""
Blob Storage Interface.

Bucket-based object storage used to persist the revision stream.

Required property of implementations: create_bucket must treat "bucket
already exists" as success. Two pipelines may race on the
bucket_exists/create_bucket check and both attempt creation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict


@dataclass(frozen=True)
class BlobStat:
    """Metadata of a stored object."""
    bucket: str
    name: str
    size_bytes: int
    content_type: str
    sha256: str
    stored_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        return {
            "bucket": self.bucket,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "content_type": self.content_type,
            "sha256": self.sha256,
            "stored_at": self.stored_at.isoformat(),
        }


class IBlobStorage(ABC):
    """
    Object storage port.

    All methods raise StorageError on failure.
    """

    @abstractmethod
    def bucket_exists(self, bucket: str) -> bool:
        pass

    @abstractmethod
    def create_bucket(self, bucket: str) -> None:
        """Create bucket; no-op if it already exists."""
        pass

    @abstractmethod
    def upload(self, bucket: str, name: str, local_path: Path, content_type: str) -> BlobStat:
        """Upload a local file as object ``name`` in ``bucket``."""
        pass

    @abstractmethod
    def get(self, bucket: str, name: str) -> bytes:
        """Read back an object's content."""
        pass

    @abstractmethod
    def stat(self, bucket: str, name: str) -> BlobStat:
        """Read back an object's metadata."""
        pass
