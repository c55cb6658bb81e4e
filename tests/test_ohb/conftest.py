"""
Pytest fixtures for OHB tests.
"""

import shutil

import pytest

from ohb.application.services import (
    CommitHistoryWalker,
    ProjectHistoryCommandHandler,
    RevisionPersistencePipeline,
    RevisionSequencer,
)
from ohb.domain.models import (
    CreateProjectHistoryRequest,
    ProjectId,
    RelativeFilePath,
    RepositoryCoordinates,
)
from ohb.infrastructure.events import OHBEventBus, reset_ohb_event_bus
from ohb.infrastructure.serialization import JsonLinesRevisionSerializer
from ohb.infrastructure.storage import InMemoryBlobStorage
from ohb.infrastructure.workers import BoundedWorkerPool

from tests.test_ohb.fakes import FakeDocumentLoader, three_commit_repository


GIT_AVAILABLE = shutil.which("git") is not None


@pytest.fixture(autouse=True)
def _reset_global_bus():
    """Keep the global event bus from leaking between tests."""
    reset_ohb_event_bus()
    yield
    reset_ohb_event_bus()


@pytest.fixture
def event_bus() -> OHBEventBus:
    return OHBEventBus(max_history=500)


@pytest.fixture
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def fake_repository():
    return three_commit_repository()


@pytest.fixture
def persistence(storage, tmp_path) -> RevisionPersistencePipeline:
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()
    return RevisionPersistencePipeline(
        serializer=JsonLinesRevisionSerializer(),
        storage=storage,
        bucket="project-history",
        temp_dir=temp_dir,
    )


@pytest.fixture
def handler(fake_repository, persistence, event_bus, tmp_path):
    """Command handler wired to the fake repository and in-memory storage."""
    handler = ProjectHistoryCommandHandler(
        navigator_factory=fake_repository.navigator_factory,
        walker=CommitHistoryWalker(FakeDocumentLoader(fake_repository)),
        sequencer=RevisionSequencer(),
        persistence=persistence,
        event_bus=event_bus,
        worker_pool=BoundedWorkerPool(max_workers=2, queue_capacity=4),
        working_root=tmp_path / "github-repos",
    )
    yield handler
    handler.shutdown(wait=True)


@pytest.fixture
def make_request():
    """Factory for CreateProjectHistoryRequest with sensible defaults."""
    def _make(
        project_id: str = "pizza-project",
        repository_url: str = "https://github.com/example/pizza.git",
        target_file_path: str = "src/pizza.owl",
        branch=None,
    ) -> CreateProjectHistoryRequest:
        return CreateProjectHistoryRequest(
            project_id=ProjectId(project_id),
            repository_coordinates=RepositoryCoordinates(repository_url, branch),
            target_file_path=RelativeFilePath(target_file_path),
        )
    return _make
