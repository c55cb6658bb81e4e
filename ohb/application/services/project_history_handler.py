"""
Project History Command Handler.

Accepts CreateProjectHistoryRequest commands, acknowledges them immediately,
and runs the clone → analyze → persist pipeline on a bounded worker pool.

Pipeline (one pool task per request, stages strictly sequential):
    clone   : navigator_factory(...).initialize()   → RepositoryClone{Succeeded,Failed}Event
    analyze : walker.walk + sequencer.sequence      → ProjectHistoryImport{Succeeded,Failed}Event
    persist : persistence.persist                   → ProjectHistoryStore{Succeeded,Failed}Event
    terminal: CreateProjectHistory{Succeeded,Failed}Event (exactly one per request)

Each stage returns a StageOutcome instead of raising, so a failure never
escapes the worker thread unobserved. The first failing stage short-circuits
the rest.

Usage:
    handler = ProjectHistoryCommandHandler(
        navigator_factory=git_navigator_factory,
        walker=CommitHistoryWalker(RdflibDocumentLoader()),
        sequencer=RevisionSequencer(),
        persistence=RevisionPersistencePipeline(serializer, storage, bucket),
        event_bus=get_ohb_event_bus(),
        worker_pool=BoundedWorkerPool(),
        working_root=Path("data/github-repos"),
    )
    response = handler.handle_request(request, UserId("alice"))
    handler.wait_for(response.operation_id, timeout=60)
"""

import logging
from collections import OrderedDict
from contextlib import contextmanager
from pathlib import Path
from threading import Event, Lock
from typing import Dict, Iterator, List, Optional

from ohb.application.services.commit_history_walker import CommitHistoryWalker
from ohb.application.services.revision_persistence import RevisionPersistencePipeline
from ohb.application.services.revision_sequencer import RevisionSequencer
from ohb.domain.events import (
    CreateProjectHistoryFailedEvent,
    CreateProjectHistorySucceededEvent,
    ProjectHistoryImportFailedEvent,
    ProjectHistoryImportSucceededEvent,
    ProjectHistoryStoreFailedEvent,
    ProjectHistoryStoreSucceededEvent,
    RepositoryCloneFailedEvent,
    RepositoryCloneSucceededEvent,
)
from ohb.domain.exceptions import WorkerPoolSaturatedError
from ohb.domain.interfaces.repository_navigation import CommitNavigatorFactory, ICommitNavigator
from ohb.domain.models.pipeline import (
    PIPELINE_TRANSITIONS,
    CreateProjectHistoryRequest,
    CreateProjectHistoryResponse,
    PipelineStage,
    PipelineState,
    PipelineStateChange,
    StageOutcome,
)
from ohb.domain.models.revision import Revision
from ohb.domain.models.value_objects import BlobLocation, OperationId, UserId
from ohb.infrastructure.events import OHBEventBus
from ohb.infrastructure.workers import BoundedWorkerPool

logger = logging.getLogger(__name__)


def root_cause_message(error: BaseException) -> str:
    """Message of the deepest exception in the ``__cause__`` chain."""
    seen = set()
    while error.__cause__ is not None and id(error) not in seen:
        seen.add(id(error))
        error = error.__cause__
    return str(error) or type(error).__name__


class _OperationContext:
    """Correlation fields stamped onto every event of one request."""

    def __init__(self, operation_id: OperationId, request: CreateProjectHistoryRequest, user_id: UserId):
        self.operation_id = operation_id
        self.request = request
        self.user_id = user_id

    def event_fields(self) -> Dict:
        return {
            "operation_id": self.operation_id,
            "request_id": self.request.request_id,
            "project_id": self.request.project_id,
            "repository_coordinates": self.request.repository_coordinates,
        }

    @property
    def label(self) -> str:
        return f"[{self.request.project_id}/{self.operation_id.short}]"


class _WorkspaceLock:
    """Lock on one working directory plus the number of pipelines holding or awaiting it."""

    def __init__(self):
        self.lock = Lock()
        self.users = 0


class ProjectHistoryCommandHandler:
    """
    Asynchronous orchestrator for project history imports.

    Thread Safety:
    - handle_request() may be called concurrently
    - Per-operation state is guarded by a Lock
    - Each pipeline uses its own navigator. Pipelines sharing a working
      directory (same user and project) run one after another.

    Only the most recent ``operation_retention`` finished operations stay
    queryable; older ones are forgotten and report as unknown.
    """

    def __init__(
        self,
        navigator_factory: CommitNavigatorFactory,
        walker: CommitHistoryWalker,
        sequencer: RevisionSequencer,
        persistence: RevisionPersistencePipeline,
        event_bus: OHBEventBus,
        worker_pool: BoundedWorkerPool,
        working_root: Path,
        operation_retention: int = 1000,
    ):
        if operation_retention < 1:
            raise ValueError(f"operation_retention must be >= 1, got {operation_retention}")
        self._navigator_factory = navigator_factory
        self._walker = walker
        self._sequencer = sequencer
        self._persistence = persistence
        self._event_bus = event_bus
        self._pool = worker_pool
        self._working_root = Path(working_root)
        self._operation_retention = operation_retention

        self._lock = Lock()
        self._states: Dict[OperationId, List[PipelineStateChange]] = {}
        self._done: Dict[OperationId, Event] = {}
        # Finished operations, oldest first
        self._finished: "OrderedDict[OperationId, None]" = OrderedDict()
        self._workspaces: Dict[Path, _WorkspaceLock] = {}

    # ═══════════════════════════════════════════════════════════════
    # Command Boundary
    # ═══════════════════════════════════════════════════════════════

    def handle_request(
        self,
        request: CreateProjectHistoryRequest,
        user_id: UserId,
    ) -> CreateProjectHistoryResponse:
        """
        Acknowledge a request and schedule its pipeline.

        Returns before any stage runs. The acknowledgement never reflects the
        pipeline outcome; that is reported through lifecycle events.
        """
        operation_id = OperationId.generate()
        context = _OperationContext(operation_id, request, user_id)
        done = Event()

        with self._lock:
            self._states[operation_id] = [PipelineStateChange(PipelineState.RECEIVED)]
            self._done[operation_id] = done

        logger.info(
            f"{context.label} Received project history request for "
            f"{request.repository_coordinates.repository_url} ({request.target_file_path})"
        )

        try:
            self._pool.submit(self._run_pipeline, context)
        except WorkerPoolSaturatedError as e:
            logger.error(f"{context.label} Request rejected: {e}")
            self._transition(operation_id, PipelineState.FAILED)
            self._event_bus.publish(CreateProjectHistoryFailedEvent(
                failed_stage=None,
                error_message=str(e),
                **context.event_fields(),
            ))
            done.set()

        return CreateProjectHistoryResponse(
            project_id=request.project_id,
            operation_id=operation_id,
            repository_coordinates=request.repository_coordinates,
        )

    # ═══════════════════════════════════════════════════════════════
    # Operation Queries
    # ═══════════════════════════════════════════════════════════════

    def get_state(self, operation_id: OperationId) -> Optional[PipelineState]:
        """Current state of an operation, None if unknown."""
        with self._lock:
            history = self._states.get(operation_id)
            return history[-1].state if history else None

    def get_state_history(self, operation_id: OperationId) -> List[PipelineStateChange]:
        """All state changes of an operation, oldest first."""
        with self._lock:
            return list(self._states.get(operation_id, []))

    def wait_for(self, operation_id: OperationId, timeout: Optional[float] = None) -> Optional[PipelineState]:
        """
        Block until the operation reaches a terminal state or timeout elapses.

        Returns:
            The state at return time (non-terminal on timeout), None if unknown
        """
        with self._lock:
            done = self._done.get(operation_id)
        if done is None:
            return None
        done.wait(timeout)
        return self.get_state(operation_id)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    # ═══════════════════════════════════════════════════════════════
    # Pipeline
    # ═══════════════════════════════════════════════════════════════

    def _run_pipeline(self, context: _OperationContext) -> None:
        try:
            with self._exclusive_workspace(context):
                self._run_stages(context)
        finally:
            with self._lock:
                done = self._done.get(context.operation_id)
            if done is not None:
                done.set()

    def _run_stages(self, context: _OperationContext) -> None:
        clone = self._clone(context)
        if not clone.is_success:
            self._fail(context, clone)
            return

        analyze = self._analyze(context, clone.value)
        if not analyze.is_success:
            self._fail(context, analyze)
            return

        persist = self._persist(context, analyze.value)
        if not persist.is_success:
            self._fail(context, persist)
            return

        self._transition(context.operation_id, PipelineState.SUCCEEDED)
        logger.info(f"{context.label} Project history created at {persist.value}")
        self._event_bus.publish(CreateProjectHistorySucceededEvent(
            document_location=persist.value,
            **context.event_fields(),
        ))

    def _clone(self, context: _OperationContext) -> StageOutcome[ICommitNavigator]:
        request = context.request
        self._transition(context.operation_id, PipelineState.CLONING)
        working_directory = self._working_directory_for(context)
        try:
            navigator = self._navigator_factory(
                request.repository_coordinates,
                working_directory,
                [str(request.target_file_path)],
            )
            navigator.initialize()
            head = navigator.get_current_commit_metadata()
        except Exception as e:
            logger.error(f"{context.label} Clone failed: {e}", exc_info=True)
            self._transition(context.operation_id, PipelineState.CLONE_FAILED)
            self._event_bus.publish(RepositoryCloneFailedEvent(
                error_message=root_cause_message(e),
                **context.event_fields(),
            ))
            return StageOutcome.failure(PipelineStage.CLONE, e)

        logger.info(f"{context.label} Cloned into {working_directory} at {head.short_hash}")
        self._transition(context.operation_id, PipelineState.CLONED)
        self._event_bus.publish(RepositoryCloneSucceededEvent(
            working_directory=str(working_directory),
            head_commit=head.commit_hash,
            **context.event_fields(),
        ))
        return StageOutcome.success(PipelineStage.CLONE, navigator)

    def _analyze(self, context: _OperationContext, navigator: ICommitNavigator) -> StageOutcome[List[Revision]]:
        request = context.request
        self._transition(context.operation_id, PipelineState.ANALYZING)
        try:
            records = self._walker.walk(request.target_file_path, navigator)
            revisions = self._sequencer.sequence(
                records, request.repository_coordinates.repository_url
            )
        except Exception as e:
            logger.error(f"{context.label} History analysis failed: {e}", exc_info=True)
            self._transition(context.operation_id, PipelineState.ANALYZE_FAILED)
            self._event_bus.publish(ProjectHistoryImportFailedEvent(
                target_file_path=str(request.target_file_path),
                error_message=root_cause_message(e),
                **context.event_fields(),
            ))
            return StageOutcome.failure(PipelineStage.ANALYZE, e)

        logger.info(f"{context.label} Built {len(revisions)} revisions")
        self._transition(context.operation_id, PipelineState.ANALYZED)
        self._event_bus.publish(ProjectHistoryImportSucceededEvent(
            target_file_path=str(request.target_file_path),
            revision_count=len(revisions),
            **context.event_fields(),
        ))
        return StageOutcome.success(PipelineStage.ANALYZE, revisions)

    def _persist(self, context: _OperationContext, revisions: List[Revision]) -> StageOutcome[BlobLocation]:
        self._transition(context.operation_id, PipelineState.PERSISTING)
        try:
            location = self._persistence.persist(revisions)
        except Exception as e:
            logger.error(f"{context.label} Storing project history failed: {e}", exc_info=True)
            self._transition(context.operation_id, PipelineState.PERSIST_FAILED)
            self._event_bus.publish(ProjectHistoryStoreFailedEvent(
                error_message=root_cause_message(e),
                **context.event_fields(),
            ))
            return StageOutcome.failure(PipelineStage.PERSIST, e)

        self._transition(context.operation_id, PipelineState.PERSISTED)
        self._event_bus.publish(ProjectHistoryStoreSucceededEvent(
            document_location=location,
            **context.event_fields(),
        ))
        return StageOutcome.success(PipelineStage.PERSIST, location)

    def _fail(self, context: _OperationContext, outcome: StageOutcome) -> None:
        self._transition(context.operation_id, PipelineState.FAILED)
        self._event_bus.publish(CreateProjectHistoryFailedEvent(
            failed_stage=outcome.stage.value,
            error_message=root_cause_message(outcome.error),
            **context.event_fields(),
        ))

    # ═══════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════

    def _working_directory_for(self, context: _OperationContext) -> Path:
        return self._working_root / str(context.user_id) / str(context.request.project_id)

    @contextmanager
    def _exclusive_workspace(self, context: _OperationContext) -> Iterator[None]:
        """Hold the working directory of ``context`` for the whole pipeline."""
        directory = self._working_directory_for(context)
        with self._lock:
            workspace = self._workspaces.setdefault(directory, _WorkspaceLock())
            workspace.users += 1
            contended = workspace.users > 1
        if contended:
            logger.info(f"{context.label} Waiting for running import of the same project")
        try:
            with workspace.lock:
                yield
        finally:
            with self._lock:
                workspace.users -= 1
                if workspace.users == 0:
                    del self._workspaces[directory]

    def _transition(self, operation_id: OperationId, new_state: PipelineState) -> None:
        with self._lock:
            history = self._states[operation_id]
            current = history[-1].state
            if new_state not in PIPELINE_TRANSITIONS[current]:
                raise RuntimeError(f"Illegal pipeline transition {current.name} -> {new_state.name}")
            history.append(PipelineStateChange(new_state))
            if new_state.is_terminal:
                self._retire(operation_id)
        logger.debug(f"Operation {operation_id.short}: {current.name} -> {new_state.name}")

    def _retire(self, operation_id: OperationId) -> None:
        """Record a finished operation and forget the oldest beyond retention. Lock must be held."""
        self._finished[operation_id] = None
        while len(self._finished) > self._operation_retention:
            evicted, _ = self._finished.popitem(last=False)
            self._states.pop(evicted, None)
            done = self._done.pop(evicted, None)
            if done is not None:
                done.set()
