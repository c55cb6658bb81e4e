"""
Filesystem Blob Storage.

IBlobStorage that keeps objects on local disk:

    <root>/<bucket>/<name>              object content
    <root>/<bucket>/<name>.meta.json    content type, size, sha256, stored_at

Uploads are written to a temporary file in the bucket directory and renamed
into place, so readers never observe a partially written object.
"""

import hashlib
import json
import logging
import os
import shutil
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import List

from ohb.domain.exceptions import StorageError
from ohb.domain.interfaces.blob_storage import BlobStat, IBlobStorage

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta.json"


class FileSystemBlobStorage(IBlobStorage):
    """
    Bucket/object storage rooted at a local directory.

    Thread-safe for concurrent uploads of distinct object names.
    """

    def __init__(self, root: Path):
        self._root = Path(root)
        self._lock = threading.RLock()
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Storage root is not usable: {self._root}") from e

    @property
    def root(self) -> Path:
        return self._root

    def bucket_exists(self, bucket: str) -> bool:
        return self._bucket_path(bucket).is_dir()

    def create_bucket(self, bucket: str) -> None:
        try:
            # exist_ok: another pipeline may have created it since bucket_exists
            self._bucket_path(bucket).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Could not create bucket {bucket}: {e}") from e
        logger.debug(f"Bucket ready: {bucket}")

    def upload(self, bucket: str, name: str, local_path: Path, content_type: str) -> BlobStat:
        bucket_dir = self._bucket_path(bucket)
        if not bucket_dir.is_dir():
            raise StorageError(f"Bucket does not exist: {bucket}")
        target = self._object_path(bucket, name)
        staging = bucket_dir / f".{name}.{uuid.uuid4().hex}.part"

        try:
            digest = hashlib.sha256()
            with open(local_path, "rb") as src, open(staging, "wb") as dst:
                for chunk in iter(lambda: src.read(64 * 1024), b""):
                    digest.update(chunk)
                    dst.write(chunk)
            size = staging.stat().st_size

            stat = BlobStat(
                bucket=bucket,
                name=name,
                size_bytes=size,
                content_type=content_type,
                sha256=digest.hexdigest(),
                stored_at=datetime.now(),
            )
            with self._lock:
                os.replace(staging, target)
                self._meta_path(bucket, name).write_text(json.dumps(stat.to_dict()), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Upload of {bucket}/{name} failed: {e}") from e
        finally:
            if staging.exists():
                staging.unlink()

        logger.info(f"Uploaded {bucket}/{name} ({size} bytes)")
        return stat

    def get(self, bucket: str, name: str) -> bytes:
        path = self._object_path(bucket, name)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {bucket}/{name}") from e
        except OSError as e:
            raise StorageError(f"Could not read {bucket}/{name}: {e}") from e

    def stat(self, bucket: str, name: str) -> BlobStat:
        meta_path = self._meta_path(bucket, name)
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {bucket}/{name}") from e
        except (OSError, ValueError) as e:
            raise StorageError(f"Corrupt metadata for {bucket}/{name}: {e}") from e
        return BlobStat(
            bucket=data["bucket"],
            name=data["name"],
            size_bytes=data["size_bytes"],
            content_type=data["content_type"],
            sha256=data["sha256"],
            stored_at=datetime.fromisoformat(data["stored_at"]),
        )

    def list_objects(self, bucket: str) -> List[str]:
        """Object names in a bucket, sorted."""
        bucket_dir = self._bucket_path(bucket)
        if not bucket_dir.is_dir():
            return []
        return sorted(
            p.name for p in bucket_dir.iterdir()
            if p.is_file() and not p.name.endswith(META_SUFFIX) and not p.name.startswith(".")
        )

    def delete_bucket(self, bucket: str) -> None:
        """Remove a bucket and everything in it."""
        shutil.rmtree(self._bucket_path(bucket), ignore_errors=True)

    # ═══════════════════════════════════════════════════════════════
    # Paths
    # ═══════════════════════════════════════════════════════════════

    def _bucket_path(self, bucket: str) -> Path:
        self._validate_segment(bucket, "bucket")
        return self._root / bucket

    def _object_path(self, bucket: str, name: str) -> Path:
        self._validate_segment(name, "object name")
        return self._bucket_path(bucket) / name

    def _meta_path(self, bucket: str, name: str) -> Path:
        return self._object_path(bucket, name).with_name(name + META_SUFFIX)

    @staticmethod
    def _validate_segment(value: str, kind: str) -> None:
        if not value or "/" in value or "\\" in value or value in (".", "..") or value.startswith("."):
            raise StorageError(f"Invalid {kind}: {value!r}")
