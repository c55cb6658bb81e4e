"""
REST API Pydantic Models (Request/Response Schemas).

Request models validate shape only; domain rules (relative path safety,
identifier formats) are enforced by the domain value objects and surface
as 422 responses through the application's exception handlers.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Literal
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict


# ═══════════════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════════════

class PipelineStateEnum(str, Enum):
    """Pipeline state enum for API."""
    RECEIVED = "received"
    CLONING = "cloning"
    CLONED = "cloned"
    CLONE_FAILED = "clone_failed"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    ANALYZE_FAILED = "analyze_failed"
    PERSISTING = "persisting"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ═══════════════════════════════════════════════════════════════════════════════
# Common Models
# ═══════════════════════════════════════════════════════════════════════════════

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(from_attributes=True)


class HealthResponse(BaseModel):
    """Health check response."""
    status: Literal["healthy", "degraded", "unhealthy"]
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    components: Dict[str, str] = Field(
        default_factory=dict,
        description="Component health status"
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Project History Models
# ═══════════════════════════════════════════════════════════════════════════════

class CreateProjectHistoryRequestModel(BaseModel):
    """Request to build the revision history of one ontology file."""
    project_id: str = Field(..., min_length=1, description="Target project")
    user_id: str = Field(..., min_length=1, description="Requesting user")
    repository_url: str = Field(..., min_length=1, description="Clone URL of the repository")
    branch: Optional[str] = Field(None, description="Branch to analyze (default branch if omitted)")
    target_file_path: str = Field(..., description="Repository-relative path of the root ontology")
    request_id: Optional[str] = Field(None, description="Caller-supplied request UUID")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_id": "pizza-project",
                "user_id": "alice",
                "repository_url": "https://github.com/example/pizza-ontology.git",
                "branch": "main",
                "target_file_path": "src/pizza.owl",
            }
        }
    )


class ProjectHistoryAcceptedResponse(BaseModel):
    """Acknowledgement returned before the pipeline runs."""
    operation_id: str
    request_id: str
    project_id: str
    repository_url: str
    branch: Optional[str] = None
    status_url: str = Field(..., description="Where to poll for the operation state")


class StateChangeSchema(BaseModel):
    """One entry of an operation's state history."""
    state: PipelineStateEnum
    changed_at: datetime


class OperationStatusResponse(BaseModel):
    """Current state of a project history operation."""
    operation_id: str
    state: PipelineStateEnum
    is_terminal: bool
    state_history: List[StateChangeSchema] = Field(default_factory=list)


class OperationEventsResponse(BaseModel):
    """Lifecycle events published for one operation (oldest first)."""
    operation_id: str
    events: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0
