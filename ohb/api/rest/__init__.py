"""REST API - FastAPI transport for the project history command handler."""

from .app import create_app, get_app, run_server

__all__ = [
    "create_app",
    "get_app",
    "run_server",
]
