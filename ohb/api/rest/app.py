"""
FastAPI Application Factory.

Creates and configures the OHB service application with:
- REST API routes
- Exception handlers (domain validation errors → 422)
- Logging configured from OHBConfig
- Worker pool shutdown on application exit
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from datetime import datetime, timezone

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse

from ohb import __version__
from ohb.api.rest.models import ErrorResponse
from ohb.api.rest.routes import project_history_router, health_router
from ohb.api.rest.dependencies import get_app_state, set_app_state, AppState
from ohb.config import OHBConfig, get_config
from ohb.domain.exceptions import InvalidFilePathError, InvalidIdentifierError

logger = logging.getLogger(__name__)

# Global app instance
_app: Optional[FastAPI] = None


def create_app(
    config: Optional[OHBConfig] = None,
    app_state: Optional[AppState] = None,
    title: str = "OHB API",
    version: str = __version__,
    debug: bool = False,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Service configuration (defaults to global config)
        app_state: Pre-configured application state (tests inject fakes here)
        title: API title for documentation
        version: API version
        debug: Include exception details in 500 responses

    Returns:
        Configured FastAPI application
    """
    config = config or (app_state.config if app_state else get_config())
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )

    if app_state is not None:
        set_app_state(app_state)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        state = get_app_state()
        if not state.is_initialized:
            state.initialize(config=config)
        logger.info(f"{title} {version} started")

        yield

        logger.info("Shutting down project history workers")
        state.shutdown(wait=True)

    app = FastAPI(
        title=title,
        description="""
## OHB (Ontology History Builder) API

Converts the git history of an ontology file into a numbered revision
sequence and stores it as one project history document.

- **Submit**: `POST /api/v1/project-history` (asynchronous, returns 202)
- **Track**: poll the operation state or read its lifecycle events
        """,
        version=version,
        debug=debug,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # ═══════════════════════════════════════════════════════════════════════════
    # Exception Handlers
    # ═══════════════════════════════════════════════════════════════════════════

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Handle HTTP exceptions with standard error format."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=exc.detail,
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(InvalidFilePathError)
    async def invalid_path_handler(request: Request, exc: InvalidFilePathError) -> JSONResponse:
        """Reject unsafe or malformed target file paths."""
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="INVALID_FILE_PATH",
                message=str(exc),
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(InvalidIdentifierError)
    async def invalid_identifier_handler(request: Request, exc: InvalidIdentifierError) -> JSONResponse:
        """Reject malformed identifiers and repository coordinates."""
        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="INVALID_IDENTIFIER",
                message=str(exc),
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Handle value errors as bad requests."""
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error="VALIDATION_ERROR",
                message=str(exc),
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                message="An unexpected error occurred" if not debug else str(exc),
                details={"type": type(exc).__name__} if debug else None,
                timestamp=datetime.now(timezone.utc),
            ).model_dump(mode="json"),
        )

    # ═══════════════════════════════════════════════════════════════════════════
    # Routes
    # ═══════════════════════════════════════════════════════════════════════════

    app.include_router(health_router)
    app.include_router(project_history_router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": title,
            "version": version,
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    global _app
    _app = app

    return app


def get_app() -> FastAPI:
    """Get the global FastAPI application instance."""
    global _app
    if _app is None:
        _app = create_app()
    return _app


# ═══════════════════════════════════════════════════════════════════════════════
# CLI Entry Point
# ═══════════════════════════════════════════════════════════════════════════════

def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
):
    """
    Run the API server.

    Args:
        host: Host to bind to (default: config.api_host)
        port: Port to listen on (default: config.api_port)
        reload: Enable auto-reload for development
    """
    import uvicorn

    config = get_config()
    uvicorn.run(
        "ohb.api.rest.app:get_app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=reload,
        factory=True,
    )
