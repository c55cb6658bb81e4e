"""
REST API Routes.

Provides:
- /api/v1/project-history - Project history import and status
- /api/v1/health - Health checks
"""

from .project_history import router as project_history_router
from .health import router as health_router

__all__ = [
    "project_history_router",
    "health_router",
]
