"""Storage infrastructure - blob storage implementations."""

from .filesystem_blob_storage import FileSystemBlobStorage
from .inmemory_blob_storage import InMemoryBlobStorage

__all__ = [
    "FileSystemBlobStorage",
    "InMemoryBlobStorage",
]
