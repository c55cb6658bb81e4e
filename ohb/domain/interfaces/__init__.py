"""Domain Interfaces - Abstract contracts (Ports) for the domain layer."""

from .repository_navigation import ICommitNavigator, CommitNavigatorFactory
from .document_loader import IDocumentLoader
from .blob_storage import IBlobStorage, BlobStat
from .revision_serializer import IRevisionSerializer

__all__ = [
    # Repository
    "ICommitNavigator",
    "CommitNavigatorFactory",
    # Documents
    "IDocumentLoader",
    # Storage
    "IBlobStorage",
    "BlobStat",
    # Serialization
    "IRevisionSerializer",
]
