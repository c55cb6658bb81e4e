"""
Bounded Worker Pool.

ThreadPoolExecutor with a hard bound on in-flight work. The standard
executor queues without limit, so admissions are counted with a semaphore
of ``max_workers + queue_capacity`` permits released when each task ends.

Usage:
    pool = BoundedWorkerPool(max_workers=8, queue_capacity=100)
    try:
        future = pool.submit(run_pipeline, request)
    except WorkerPoolSaturatedError:
        ...  # every worker busy and the queue is full
    pool.shutdown(wait=True)
"""

from concurrent.futures import Future, ThreadPoolExecutor
from threading import BoundedSemaphore, Lock
from typing import Any, Callable
import logging

from ohb.domain.exceptions import WorkerPoolSaturatedError

logger = logging.getLogger(__name__)

DEFAULT_THREAD_NAME_PREFIX = "project-history-import-"


class BoundedWorkerPool:
    """
    Fixed-size thread pool that rejects work instead of queueing unboundedly.

    Thread Safety:
    - submit() may be called from any thread
    - Rejection is immediate; submit() never blocks waiting for a slot
    """

    def __init__(
        self,
        max_workers: int = 8,
        queue_capacity: int = 100,
        thread_name_prefix: str = DEFAULT_THREAD_NAME_PREFIX,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        if queue_capacity < 0:
            raise ValueError(f"queue_capacity must be >= 0, got {queue_capacity}")

        self._max_workers = max_workers
        self._queue_capacity = queue_capacity
        self._permits = BoundedSemaphore(max_workers + queue_capacity)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._lock = Lock()
        self._in_flight = 0
        self._shutdown = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def queue_capacity(self) -> int:
        return self._queue_capacity

    @property
    def capacity(self) -> int:
        """Maximum number of admitted (running + queued) tasks."""
        return self._max_workers + self._queue_capacity

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """
        Schedule ``fn(*args, **kwargs)`` on a worker thread.

        Raises:
            WorkerPoolSaturatedError: No free slot, or the pool is shut down
        """
        if self._shutdown:
            raise WorkerPoolSaturatedError("Worker pool is shut down")
        if not self._permits.acquire(blocking=False):
            raise WorkerPoolSaturatedError(
                f"Worker pool saturated ({self.capacity} tasks in flight)"
            )

        with self._lock:
            self._in_flight += 1

        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as e:
            self._release()
            raise WorkerPoolSaturatedError(f"Worker pool rejected task: {e}") from e

        future.add_done_callback(lambda _: self._release())
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for admitted tasks to finish."""
        self._shutdown = True
        logger.info(f"Shutting down worker pool ({self.in_flight} tasks in flight)")
        self._executor.shutdown(wait=wait)

    def _release(self) -> None:
        with self._lock:
            self._in_flight -= 1
        self._permits.release()
