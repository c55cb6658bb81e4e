"""
In-Memory Blob Storage.

IBlobStorage holding objects in process memory, for tests and the
``inmemory`` storage mode.

Usage:
    storage = InMemoryBlobStorage()
    storage.create_bucket("project-history")
    storage.upload("project-history", "h.bin", Path("h.bin"), "application/octet-stream")

    assert storage.list_objects("project-history") == ["h.bin"]
    assert storage.get_operation_log()[-1]["operation"] == "upload"
"""

import hashlib
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Tuple

from ohb.domain.exceptions import StorageError
from ohb.domain.interfaces.blob_storage import BlobStat, IBlobStorage


class InMemoryBlobStorage(IBlobStorage):
    """
    Dictionary-backed object storage.

    Thread-safe with RLock protection for all state mutations. Every call is
    recorded in an operation log for test verification.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._buckets: Dict[str, Dict[str, Tuple[bytes, BlobStat]]] = {}
        self._operation_log: List[Dict] = []

    def _log_operation(self, operation: str, **kwargs):
        self._operation_log.append({
            "operation": operation,
            "timestamp": datetime.now().isoformat(),
            **kwargs,
        })

    def bucket_exists(self, bucket: str) -> bool:
        with self._lock:
            return bucket in self._buckets

    def create_bucket(self, bucket: str) -> None:
        with self._lock:
            self._buckets.setdefault(bucket, {})
            self._log_operation("create_bucket", bucket=bucket)

    def upload(self, bucket: str, name: str, local_path: Path, content_type: str) -> BlobStat:
        try:
            content = Path(local_path).read_bytes()
        except OSError as e:
            raise StorageError(f"Could not read upload source {local_path}: {e}") from e

        stat = BlobStat(
            bucket=bucket,
            name=name,
            size_bytes=len(content),
            content_type=content_type,
            sha256=hashlib.sha256(content).hexdigest(),
        )
        with self._lock:
            if bucket not in self._buckets:
                raise StorageError(f"Bucket does not exist: {bucket}")
            self._buckets[bucket][name] = (content, stat)
            self._log_operation("upload", bucket=bucket, name=name, size_bytes=len(content))
        return stat

    def get(self, bucket: str, name: str) -> bytes:
        return self._entry(bucket, name)[0]

    def stat(self, bucket: str, name: str) -> BlobStat:
        return self._entry(bucket, name)[1]

    def list_objects(self, bucket: str) -> List[str]:
        with self._lock:
            return sorted(self._buckets.get(bucket, {}))

    def get_operation_log(self) -> List[Dict]:
        with self._lock:
            return list(self._operation_log)

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
            self._operation_log.clear()

    def _entry(self, bucket: str, name: str) -> Tuple[bytes, BlobStat]:
        with self._lock:
            try:
                return self._buckets[bucket][name]
            except KeyError:
                raise StorageError(f"Object not found: {bucket}/{name}")
