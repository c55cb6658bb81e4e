"""
Application Factories.

Factory pattern for wiring the project history pipeline from configuration,
with explicit overrides for every collaborator so tests can inject fakes.

Usage:
    from ohb.application.factories import ProjectHistoryHandlerFactory

    handler = ProjectHistoryHandlerFactory.create(OHBConfig.for_development())

    # Tests: fake git + fake loader, real services
    handler = ProjectHistoryHandlerFactory.create(
        OHBConfig.for_testing(str(tmp_path)),
        navigator_factory=fake_navigator_factory,
        loader=FakeDocumentLoader(...),
    )
"""

import logging
from pathlib import Path
from typing import Optional

from ohb.config import OHBConfig, get_config
from ohb.domain.interfaces.blob_storage import IBlobStorage
from ohb.domain.interfaces.document_loader import IDocumentLoader
from ohb.domain.interfaces.repository_navigation import CommitNavigatorFactory
from ohb.domain.interfaces.revision_serializer import IRevisionSerializer
from ohb.infrastructure.events import OHBEventBus, get_ohb_event_bus
from ohb.infrastructure.git import git_navigator_factory
from ohb.infrastructure.ontology import RdflibDocumentLoader
from ohb.infrastructure.serialization import JsonLinesRevisionSerializer
from ohb.infrastructure.storage import FileSystemBlobStorage, InMemoryBlobStorage
from ohb.infrastructure.workers import BoundedWorkerPool

from .services.commit_history_walker import CommitHistoryWalker
from .services.project_history_handler import ProjectHistoryCommandHandler
from .services.revision_persistence import RevisionPersistencePipeline
from .services.revision_sequencer import RevisionSequencer

logger = logging.getLogger(__name__)


class ProjectHistoryHandlerFactory:
    """
    Creates ProjectHistoryCommandHandler with its dependencies.

    Every argument left as None is built from configuration.
    """

    @staticmethod
    def create(
        config: Optional[OHBConfig] = None,
        event_bus: Optional[OHBEventBus] = None,
        navigator_factory: Optional[CommitNavigatorFactory] = None,
        loader: Optional[IDocumentLoader] = None,
        storage: Optional[IBlobStorage] = None,
        serializer: Optional[IRevisionSerializer] = None,
        worker_pool: Optional[BoundedWorkerPool] = None,
    ) -> ProjectHistoryCommandHandler:
        """Create a fully wired command handler."""
        if config is None:
            config = get_config()

        sequencer = RevisionSequencer()
        persistence = ProjectHistoryHandlerFactory.create_persistence(
            config, storage=storage, serializer=serializer, sequencer=sequencer
        )

        handler = ProjectHistoryCommandHandler(
            navigator_factory=navigator_factory or git_navigator_factory,
            walker=CommitHistoryWalker(loader or RdflibDocumentLoader()),
            sequencer=sequencer,
            persistence=persistence,
            event_bus=event_bus or get_ohb_event_bus(),
            worker_pool=worker_pool or ProjectHistoryHandlerFactory.create_worker_pool(config),
            working_root=Path(config.working_root),
            operation_retention=config.operation_retention,
        )
        logger.info(
            f"Project history handler ready (storage={config.storage_config.mode}, "
            f"workers={config.worker_config.max_workers}, working_root={config.working_root})"
        )
        return handler

    @staticmethod
    def create_storage(config: OHBConfig) -> IBlobStorage:
        """Create blob storage based on config."""
        if config.storage_config.mode == "inmemory":
            return InMemoryBlobStorage()
        return FileSystemBlobStorage(config.storage_config.ensure_root())

    @staticmethod
    def create_persistence(
        config: OHBConfig,
        storage: Optional[IBlobStorage] = None,
        serializer: Optional[IRevisionSerializer] = None,
        sequencer: Optional[RevisionSequencer] = None,
    ) -> RevisionPersistencePipeline:
        return RevisionPersistencePipeline(
            serializer=serializer or JsonLinesRevisionSerializer(),
            storage=storage or ProjectHistoryHandlerFactory.create_storage(config),
            bucket=config.storage_config.bucket,
            sequencer=sequencer,
        )

    @staticmethod
    def create_worker_pool(config: OHBConfig) -> BoundedWorkerPool:
        worker_config = config.worker_config
        return BoundedWorkerPool(
            max_workers=worker_config.max_workers,
            queue_capacity=worker_config.queue_capacity,
            thread_name_prefix=worker_config.thread_name_prefix,
        )
