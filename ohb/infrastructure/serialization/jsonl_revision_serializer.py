"""
JSON Lines Revision Serializer.

One revision per line, appended as it is produced:

    {"author_id": "alice", "revision_number": 1, "changes": [...], "timestamp_ms": ..., "description": "..."}
    {"author_id": "bob", "revision_number": 2, ...}

Each append opens, writes and closes the stream, so no more than one
revision is held in memory at a time.
"""

import json
import logging
from pathlib import Path
from typing import Iterator

from ohb.domain.exceptions import SerializationError
from ohb.domain.interfaces.revision_serializer import IRevisionSerializer
from ohb.domain.models.revision import Revision

logger = logging.getLogger(__name__)


class JsonLinesRevisionSerializer(IRevisionSerializer):
    """Append-only UTF-8 JSON Lines revision stream."""

    def append(self, path: Path, revision: Revision) -> None:
        try:
            line = json.dumps(revision.to_dict(), ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Revision {revision.revision_number} is not serializable: {e}"
            ) from e

        try:
            with open(path, "a", encoding="utf-8") as stream:
                stream.write(line)
                stream.write("\n")
        except OSError as e:
            raise SerializationError(f"Could not append revision to {path}: {e}") from e

    def read(self, path: Path) -> Iterator[Revision]:
        try:
            with open(path, "r", encoding="utf-8") as stream:
                for line_number, line in enumerate(stream, start=1):
                    if not line.strip():
                        continue
                    try:
                        yield Revision.from_dict(json.loads(line))
                    except (KeyError, TypeError, ValueError) as e:
                        raise SerializationError(
                            f"Malformed revision at {path}:{line_number}: {e}"
                        ) from e
        except OSError as e:
            raise SerializationError(f"Could not read revision stream {path}: {e}") from e
