"""
Revision Persistence Pipeline.

Serializes a revision list into one temporary stream file and uploads it to
blob storage as the project history document.

Flow:
    revisions → temp file (append one at a time) → ensure bucket → upload → BlobLocation
                                                                    │
                                         finally: delete temp file ─┘

A serialization failure on any revision aborts before upload, so storage
never holds a partial history.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from ohb.application.services.revision_sequencer import RevisionSequencer
from ohb.domain.exceptions import SerializationError, StorageError
from ohb.domain.interfaces.blob_storage import IBlobStorage
from ohb.domain.interfaces.revision_serializer import IRevisionSerializer
from ohb.domain.models.ontology import CommitChangeRecord
from ohb.domain.models.revision import Revision
from ohb.domain.models.value_objects import BlobLocation

logger = logging.getLogger(__name__)

HISTORY_CONTENT_TYPE = "application/octet-stream"
TEMP_FILE_PREFIX = "ohb-"
TEMP_FILE_SUFFIX = "-project-history.bin"


class RevisionPersistencePipeline:
    """
    Stores revision streams in a blob storage bucket.

    Usage:
        pipeline = RevisionPersistencePipeline(serializer, storage, bucket="project-history")
        location = pipeline.persist(revisions)
    """

    def __init__(
        self,
        serializer: IRevisionSerializer,
        storage: IBlobStorage,
        bucket: str,
        sequencer: Optional[RevisionSequencer] = None,
        temp_dir: Optional[Path] = None,
    ):
        if not bucket:
            raise ValueError("bucket cannot be empty")
        self._serializer = serializer
        self._storage = storage
        self._bucket = bucket
        self._sequencer = sequencer or RevisionSequencer()
        self._temp_dir = temp_dir

    @property
    def bucket(self) -> str:
        return self._bucket

    def persist(self, revisions: Sequence[Revision]) -> BlobLocation:
        """
        Serialize and upload a revision list.

        Args:
            revisions: Revisions in stream order (oldest first)

        Returns:
            Location of the uploaded document

        Raises:
            SerializationError: A revision could not be written, nothing uploaded
            StorageError: Bucket creation or upload failed
        """
        if revisions is None:
            raise ValueError("revisions cannot be None")

        temp_path = self._create_temp_file()
        try:
            self._write_revisions(temp_path, revisions)
            location = BlobLocation.generate(self._bucket)
            self._upload(temp_path, location)
            logger.info(f"Stored {len(revisions)} revisions at {location}")
            return location
        finally:
            self._delete_temp_file(temp_path)

    def persist_records(
        self,
        records: Sequence[CommitChangeRecord],
        repository_url: str = "",
    ) -> BlobLocation:
        """Sequence newest-first commit records into revisions and persist them."""
        revisions = self._sequencer.sequence(records, repository_url)
        return self.persist(revisions)

    # ═══════════════════════════════════════════════════════════════
    # Internals
    # ═══════════════════════════════════════════════════════════════

    def _create_temp_file(self) -> Path:
        try:
            fd, name = tempfile.mkstemp(
                prefix=TEMP_FILE_PREFIX,
                suffix=TEMP_FILE_SUFFIX,
                dir=str(self._temp_dir) if self._temp_dir else None,
            )
        except OSError as e:
            raise StorageError(f"Could not create temporary history file: {e}") from e
        os.close(fd)
        return Path(name)

    def _write_revisions(self, path: Path, revisions: Sequence[Revision]) -> None:
        written = 0
        for revision in revisions:
            try:
                self._serializer.append(path, revision)
            except SerializationError:
                logger.error(
                    f"Failed to serialize revision {revision.revision_number} "
                    f"after {written} revisions"
                )
                raise
            except Exception as e:
                logger.error(f"Failed to serialize revision {revision.revision_number}: {e}")
                raise SerializationError(
                    f"Could not write revision {revision.revision_number}"
                ) from e
            written += 1
        logger.debug(f"Wrote {written} revisions to {path}")

    def _upload(self, path: Path, location: BlobLocation) -> None:
        try:
            if not self._storage.bucket_exists(location.bucket):
                logger.info(f"Creating bucket {location.bucket}")
                self._storage.create_bucket(location.bucket)
            self._storage.upload(location.bucket, location.name, path, HISTORY_CONTENT_TYPE)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Could not store project history at {location}: {e}") from e

    @staticmethod
    def _delete_temp_file(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not delete temporary history file {path}: {e}")
