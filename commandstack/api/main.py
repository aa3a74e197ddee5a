"""
FastAPI application for CommandStack.

This is the main entry point for the HTTP API, providing:
- Command, task and context CRUD
- Google sign-in with one-time-token session handoff
- Google Calendar listing and sync
- Health endpoint
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from commandstack import __version__
from commandstack.api.auth_routes import router as auth_router
from commandstack.api.calendar_routes import router as calendar_router
from commandstack.api.command_routes import router as command_router
from commandstack.api.context_routes import router as context_router
from commandstack.api.middleware import RequestLoggingMiddleware
from commandstack.api.models import HealthResponse
from commandstack.api.task_routes import router as task_router
from commandstack.config import get_settings
from commandstack.database import check_connection, init_db
from commandstack.services import ServiceError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    """Configure root logging from settings."""
    logging.basicConfig(level=get_settings().log_level, format=LOG_FORMAT)


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    settings = get_settings()

    logger.info(f"Starting CommandStack API ({settings.python_env})")
    if settings.is_development:
        init_db()
    if not settings.uses_google_oauth:
        logger.warning("Google OAuth is not configured; sign-in is disabled")
    logger.info("CommandStack API started")

    yield

    logger.info("Shutting down CommandStack API")


# =============================================================================
# FastAPI Application
# =============================================================================


settings = get_settings()

app = FastAPI(
    title="CommandStack API",
    description="""
# CommandStack API

Personal command and task tracker with Google Calendar sync.

## Sign-in

1. **GET /api/auth/google/login?source=web|app** - Start Google sign-in
2. The server hands the session to the client through a one-time token
3. **POST /api/auth/exchange** - Trade the token for a session cookie

## Error Handling

- **401** - Not signed in, or invalid one-time token
- **404** - Command, task or context not found
- **409** - Duplicate context namespace or context still in use
- **422** - Validation error
- **500** - Server error
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add middleware (last added runs first)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    same_site="lax",
    https_only=settings.is_production,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(command_router)
app.include_router(task_router)
app.include_router(context_router)
app.include_router(calendar_router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_type": "http_error",
            "message": exc.detail,
            "retryable": exc.status_code >= 500,
        },
    )


@app.exception_handler(ServiceError)
async def service_exception_handler(request, exc: ServiceError):
    """Render domain errors (not found, conflict) with their status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_type": exc.error_type,
            "message": exc.message,
            "retryable": False,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error_type": "internal_error",
            "message": "An unexpected error occurred",
            "retryable": True,
        },
    )


# =============================================================================
# Health Endpoint
# =============================================================================


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    tags=["System"],
)
def health_check():
    """Check API and database health."""
    database_connected = check_connection()

    return HealthResponse(
        status="healthy" if database_connected else "unhealthy",
        version=__version__,
        database_connected=database_connected,
    )


# =============================================================================
# Run with Uvicorn
# =============================================================================


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = False):
    """Run the API server with Uvicorn."""
    import uvicorn

    uvicorn.run(
        "commandstack.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server(reload=True)
