"""Worker infrastructure - bounded thread pool for pipeline execution."""

from .bounded_pool import BoundedWorkerPool, DEFAULT_THREAD_NAME_PREFIX

__all__ = [
    "BoundedWorkerPool",
    "DEFAULT_THREAD_NAME_PREFIX",
]
