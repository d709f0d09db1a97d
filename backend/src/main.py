"""
FastAPI application entry point for the broadcast scheduling backend.

This module initializes the FastAPI application with:
- Application state (WebSocket connection manager, change notifier)
- CORS middleware for frontend development
- Exception handlers for consistent error responses
- Logging configuration

Environment Variables:
    BCAST_DB_URL: Database URL (default: local PostgreSQL)
    BCAST_ENV: Environment (production/development, default: development)
    BCAST_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
    BCAST_CREATE_TABLES: Create tables on startup (development databases only)
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.src.config.settings import get_settings
from backend.src.services.notification_service import get_event_notifier
from backend.src.utils.logging_config import init_logging, get_logger
from backend.src.utils.websocket import get_connection_manager


APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: create singletons, bind the change notifier to the running
      loop, optionally create tables
    - Shutdown: detach the notifier

    Args:
        app: FastAPI application instance

    Yields:
        Control to the application
    """
    # Startup
    logger = get_logger("api")
    logger.info("Starting broadcast scheduling backend")

    settings = get_settings()
    if settings.create_tables:
        from backend.src.db.database import init_db
        logger.info("Creating database tables")
        init_db()

    app.state.websocket_manager = get_connection_manager()
    notifier = get_event_notifier()
    notifier.bind_loop(asyncio.get_running_loop())
    app.state.event_notifier = notifier

    logger.info("Broadcast scheduling backend started successfully")

    yield

    # Shutdown
    notifier.bind_loop(None)
    logger.info("Shutting down broadcast scheduling backend")


# Initialize logging before creating app
init_logging()

# Create FastAPI application
app = FastAPI(
    title="Broadcast Scheduler API",
    description="Backend API for scheduling broadcast productions across cities "
                "and assigning observers, SNG units and generators with "
                "conflict and travel-time validation.",
    version=APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Configure CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers


@app.exception_handler(ValidationError)
async def validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors raised outside request parsing.

    Args:
        request: HTTP request
        exc: Pydantic ValidationError

    Returns:
        JSON response with validation error details
    """
    logger = get_logger("api")
    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "Validation Error",
            "message": "Request validation failed",
            "details": exc.errors(include_url=False, include_context=False),
        }
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """
    Handle SQLAlchemy database errors.

    Returns:
        JSON response with database error message
    """
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Database Error",
            "message": "An error occurred while accessing the database. "
                      "Please try again later.",
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle all other unhandled exceptions.

    Returns:
        JSON response with generic error message
    """
    logger = get_logger("api")
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred. Please try again later.",
        }
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "broadcast-scheduler-backend",
        "version": APP_VERSION,
    }


# API routers
from backend.src.api import cities, city_distances, events, resources

app.include_router(cities.router, prefix="/api")
app.include_router(city_distances.router, prefix="/api")
app.include_router(resources.router, prefix="/api")
app.include_router(events.router, prefix="/api")


# Root endpoint


@app.get("/", tags=["Root"])
async def root() -> Dict[str, str]:
    """
    Root endpoint with API information.

    Returns:
        API metadata and documentation links
    """
    return {
        "message": "Broadcast Scheduler API",
        "version": APP_VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "openapi": "/openapi.json",
    }
