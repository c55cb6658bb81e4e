"""
Project History Exceptions.

Exception hierarchy for the ontology history pipeline.

Design Principles:
- Hierarchy: All inherit from OHBError base
- Stage-aligned: Each pipeline stage has its own fatal error type
- Chained: Wrapping errors keep the original cause via ``raise ... from``
"""


class OHBError(Exception):
    """
    Base exception for ontology history errors.

    Allows catching all pipeline errors with one handler.
    """
    pass


class InvalidFilePathError(OHBError, ValueError):
    """
    Invalid repository-relative file path.

    Raised when RelativeFilePath validation fails:
    - Empty or not a string
    - Absolute (leading slash or drive letter)
    - Contains path traversal (..)
    - Uses backslashes
    """
    pass


class InvalidIdentifierError(OHBError, ValueError):
    """Identifier value object failed validation."""
    pass


class RepositoryAccessError(OHBError):
    """
    Repository could not be cloned or navigated.

    Fatal: aborts the clone stage, or the whole walk when raised mid-history.
    """
    pass


class DocumentLoadError(OHBError):
    """
    Ontology document could not be loaded at one commit.

    Tolerated by the commit walker: the commit is skipped and the walk continues.
    """
    pass


class ComparisonError(OHBError):
    """
    Unexpected failure while walking or diffing the commit history.

    Fatal for the analyze stage. No partial history is returned.
    """
    pass


class StorageError(OHBError):
    """
    Blob storage bucket or upload failure.

    Fatal for the persist stage.
    """
    pass


class SerializationError(OHBError):
    """
    A revision could not be written to the history stream.

    Fatal: persistence is aborted before any upload is attempted.
    """
    pass


class WorkerPoolSaturatedError(OHBError):
    """Worker pool has no free slot (all workers busy and queue full)."""
    pass


__all__ = [
    "OHBError",
    "InvalidFilePathError",
    "InvalidIdentifierError",
    "RepositoryAccessError",
    "DocumentLoadError",
    "ComparisonError",
    "StorageError",
    "SerializationError",
    "WorkerPoolSaturatedError",
]
