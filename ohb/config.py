"""
OHB Configuration.

Centralized configuration for the ontology history builder.

Supports two deployment modes:
- Testing: In-memory blob storage, small worker pool, temp-friendly paths
- Development / service: Filesystem blob storage under the data directory

Usage:
    from ohb.config import OHBConfig

    # For testing
    config = OHBConfig.for_testing()

    # For development
    config = OHBConfig.for_development()

    # From environment
    config = OHBConfig.from_env()
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path

STORAGE_MODES = ("filesystem", "inmemory")


# ═══════════════════════════════════════════════════════════════
# Worker Pool Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class WorkerPoolConfig:
    """
    Pipeline worker pool configuration.

    Attributes:
        max_workers: Concurrent pipelines
        queue_capacity: Requests admitted beyond max_workers before rejection
        thread_name_prefix: Worker thread name prefix
    """
    max_workers: int = 8
    queue_capacity: int = 100
    thread_name_prefix: str = "project-history-import-"

    def __post_init__(self):
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.queue_capacity < 0:
            raise ValueError(f"queue_capacity must be >= 0, got {self.queue_capacity}")

    @classmethod
    def for_testing(cls) -> "WorkerPoolConfig":
        """Config for unit tests."""
        return cls(max_workers=2, queue_capacity=4)

    @classmethod
    def for_development(cls) -> "WorkerPoolConfig":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "max_workers": self.max_workers,
            "queue_capacity": self.queue_capacity,
            "thread_name_prefix": self.thread_name_prefix,
        }


# ═══════════════════════════════════════════════════════════════
# Storage Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class StorageConfig:
    """
    Blob storage configuration for project history documents.

    Attributes:
        mode: "filesystem" or "inmemory"
        root: Root directory for filesystem mode
        bucket: Bucket receiving project history documents
    """
    mode: str = "filesystem"
    root: str = "data/blob-storage"
    bucket: str = "project-history"

    def __post_init__(self):
        if self.mode not in STORAGE_MODES:
            raise ValueError(f"Unknown storage mode {self.mode!r}, expected one of {STORAGE_MODES}")
        if not self.bucket:
            raise ValueError("bucket cannot be empty")

    @classmethod
    def for_testing(cls) -> "StorageConfig":
        """In-memory storage, nothing written to disk."""
        return cls(mode="inmemory")

    @classmethod
    def for_development(cls, data_dir: str = "data") -> "StorageConfig":
        return cls(mode="filesystem", root=f"{data_dir}/blob-storage")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {"mode": self.mode, "root": self.root, "bucket": self.bucket}

    def ensure_root(self) -> Path:
        path = Path(self.root)
        path.mkdir(parents=True, exist_ok=True)
        return path


# ═══════════════════════════════════════════════════════════════
# OHB Configuration
# ═══════════════════════════════════════════════════════════════


@dataclass
class OHBConfig:
    """
    Root configuration.

    Attributes:
        data_dir: Base directory for data files
        working_root: Parent of per-request clone directories
            (<working_root>/<user_id>/<project_id>)
        storage_config: Blob storage settings
        worker_config: Worker pool settings
        event_history_size: Events retained by the event bus
        operation_retention: Finished operations whose state the handler keeps
        log_level: Logging level name
        api_host: Bind address for the REST service
        api_port: Port for the REST service
    """
    data_dir: str = "data"
    working_root: Optional[str] = None
    storage_config: StorageConfig = field(default_factory=StorageConfig)
    worker_config: WorkerPoolConfig = field(default_factory=WorkerPoolConfig)
    event_history_size: int = 1000
    operation_retention: int = 1000
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    def __post_init__(self):
        """Default working_root under data_dir if not provided."""
        if self.working_root is None:
            self.working_root = f"{self.data_dir}/github-repos"
        if self.operation_retention < 1:
            raise ValueError(f"operation_retention must be >= 1, got {self.operation_retention}")

    @classmethod
    def from_env(cls) -> "OHBConfig":
        """
        Create config from environment variables.

        Environment Variables:
            OHB_DATA_DIR: Base data directory (default: "data")
            OHB_WORKING_ROOT: Clone directory root (default: "<data_dir>/github-repos")
            OHB_STORAGE_MODE: "filesystem" or "inmemory" (default: "filesystem")
            OHB_STORAGE_ROOT: Filesystem storage root (default: "<data_dir>/blob-storage")
            OHB_HISTORY_BUCKET: Bucket name (default: "project-history")
            OHB_MAX_WORKERS: Worker threads (default: 8)
            OHB_QUEUE_CAPACITY: Queued requests beyond workers (default: 100)
            OHB_OPERATION_RETENTION: Finished operations kept queryable (default: 1000)
            OHB_LOG_LEVEL: Logging level (default: "INFO")
            OHB_API_HOST / OHB_API_PORT: REST bind address (default: 127.0.0.1:8000)

        Returns:
            OHBConfig instance
        """
        data_dir = os.getenv("OHB_DATA_DIR", "data")

        return cls(
            data_dir=data_dir,
            working_root=os.getenv("OHB_WORKING_ROOT", f"{data_dir}/github-repos"),
            storage_config=StorageConfig(
                mode=os.getenv("OHB_STORAGE_MODE", "filesystem"),
                root=os.getenv("OHB_STORAGE_ROOT", f"{data_dir}/blob-storage"),
                bucket=os.getenv("OHB_HISTORY_BUCKET", "project-history"),
            ),
            worker_config=WorkerPoolConfig(
                max_workers=int(os.getenv("OHB_MAX_WORKERS", "8")),
                queue_capacity=int(os.getenv("OHB_QUEUE_CAPACITY", "100")),
            ),
            operation_retention=int(os.getenv("OHB_OPERATION_RETENTION", "1000")),
            log_level=os.getenv("OHB_LOG_LEVEL", "INFO"),
            api_host=os.getenv("OHB_API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("OHB_API_PORT", "8000")),
        )

    @classmethod
    def for_testing(cls, data_dir: str = "data") -> "OHBConfig":
        """
        Create config for unit tests (in-memory storage, small pool).

        Args:
            data_dir: Directory that receives clone working copies
        """
        return cls(
            data_dir=data_dir,
            storage_config=StorageConfig.for_testing(),
            worker_config=WorkerPoolConfig.for_testing(),
            event_history_size=200,
            operation_retention=50,
            log_level="DEBUG",
        )

    @classmethod
    def for_development(cls, data_dir: str = "data") -> "OHBConfig":
        """
        Create config for development (filesystem storage).

        Args:
            data_dir: Directory for clones and stored documents
        """
        return cls(
            data_dir=data_dir,
            storage_config=StorageConfig.for_development(data_dir),
            worker_config=WorkerPoolConfig.for_development(),
            log_level="DEBUG",
        )

    def ensure_data_dir(self) -> Path:
        path = Path(self.data_dir)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary."""
        return {
            "data_dir": self.data_dir,
            "working_root": self.working_root,
            "storage_config": self.storage_config.to_dict(),
            "worker_config": self.worker_config.to_dict(),
            "event_history_size": self.event_history_size,
            "operation_retention": self.operation_retention,
            "log_level": self.log_level,
            "api_host": self.api_host,
            "api_port": self.api_port,
        }


# Global config instance (lazily initialized)
_global_config: Optional[OHBConfig] = None


def get_config() -> OHBConfig:
    """
    Get global OHB configuration.

    Initializes from environment on first call.
    """
    global _global_config
    if _global_config is None:
        _global_config = OHBConfig.from_env()
    return _global_config


def set_config(config: OHBConfig) -> None:
    """Set global OHB configuration (tests override with this)."""
    global _global_config
    _global_config = config


def reset_config() -> None:
    """
    Reset global configuration to None.

    Next call to get_config() will reinitialize from environment.
    """
    global _global_config
    _global_config = None
