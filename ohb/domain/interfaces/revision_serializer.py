"""
Revision Serializer Interface.

Writes and reads the append-only revision stream that is uploaded as the
project history document.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from ohb.domain.models.revision import Revision


class IRevisionSerializer(ABC):
    """Streaming serializer for revisions (one record at a time)."""

    @abstractmethod
    def append(self, path: Path, revision: Revision) -> None:
        """
        Append one revision to the stream at ``path``.

        Raises:
            SerializationError: Revision could not be encoded or written
        """
        pass

    @abstractmethod
    def read(self, path: Path) -> Iterator[Revision]:
        """Yield revisions in stream order."""
        pass
