"""
Commit Navigation Interface.

Contract for a local working copy that can be stepped backwards through the
commit ancestry of a repository, one commit at a time.

Usage:
    navigator = factory(coordinates, working_directory, file_filters=["onto.owl"])
    navigator.initialize()                      # clone + checkout newest commit
    path = navigator.resolve_path(RelativeFilePath("onto.owl"))
    while navigator.has_previous_commit():
        navigator.checkout_previous()
        meta = navigator.get_current_commit_metadata()
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Sequence

from ohb.domain.models.ontology import CommitMetadata
from ohb.domain.models.value_objects import RelativeFilePath, RepositoryCoordinates


class ICommitNavigator(ABC):
    """
    Working copy with backwards commit navigation.

    All methods raise RepositoryAccessError on failure.
    """

    @property
    @abstractmethod
    def working_directory(self) -> Path:
        """Local directory holding the working copy."""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """Acquire the working copy and check out the newest commit."""
        pass

    @abstractmethod
    def get_current_commit_metadata(self) -> CommitMetadata:
        """Metadata of the currently checked-out commit."""
        pass

    @abstractmethod
    def has_previous_commit(self) -> bool:
        """True while an older commit remains on the traversed path."""
        pass

    @abstractmethod
    def checkout_previous(self) -> None:
        """Check out the next older commit."""
        pass

    @abstractmethod
    def resolve_path(self, relative_path: RelativeFilePath) -> Path:
        """Absolute location of a repository-relative path in the working copy."""
        pass


# (coordinates, working_directory, file_filters) -> navigator
CommitNavigatorFactory = Callable[
    [RepositoryCoordinates, Path, Optional[Sequence[str]]], ICommitNavigator
]
