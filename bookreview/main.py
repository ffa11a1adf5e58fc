"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Tests import the module-level instance and override get_db

2. Lifespan Events
   - startup/shutdown logging and connection pool disposal

3. Middleware Stack
   - Rate limiting (slowapi)
   - CORS: Allow cross-origin requests

4. Exception Handlers
   - Every failure is rendered as {"error": "<message>"}
   - Database errors are logged and answered generically
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bookreview import __version__
from bookreview.config import get_settings
from bookreview.database import engine
from bookreview.dependencies import DbSession
from bookreview.exceptions import BookReviewError
from bookreview.routers import (
    auth_router,
    books_router,
    reviews_router,
    search_router,
)
from bookreview.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
# Configure logging before creating the app
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield: Runs on startup
    Code after yield: Runs on shutdown
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name} v{__version__}...")
    logger.info(f"Environment: {settings.environment}, debug: {settings.debug}")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")
    engine.dispose()


# =============================================================================
# Error Rendering
# =============================================================================
def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    """Render a failure in the API's error shape."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=headers,
    )


def validation_message(exc: RequestValidationError) -> str:
    """
    Turn the first schema failure into a readable message.

    Messages raised by our own validators are passed through unchanged;
    built-in constraint failures are prefixed with the field name.
    """
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    error = errors[0]
    error_type = error.get("type", "")
    # Drop the "body"/"query"/"path" location marker
    field = ".".join(str(part) for part in error.get("loc", ())[1:])

    if error_type == "json_invalid":
        return "Invalid JSON in request body"
    if error_type == "value_error" and "error" in error.get("ctx", {}):
        return str(error["ctx"]["error"])
    if error_type == "missing":
        return f"{field} is required" if field else "Request body is required"
    if field:
        return f"{field}: {error.get('msg', 'invalid value')}"
    return error.get("msg", "Invalid request")


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Book Review API

A RESTful API for sharing books and reviewing them.

### Features
- **Books**: Submit books, list them with author/genre filters
- **Reviews**: One review per user per book, editable by its author
- **Search**: Ranked search over titles and authors

### Authentication
Sign up or log in under `/api/auth`, then send the token as
`Authorization: Bearer <token>`.

### Rate Limiting
Requests are limited per client IP; signup and login are limited more strictly.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    # Attach the limiter to the app state so it can be accessed by decorators
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(BookReviewError)
    async def book_review_error_handler(
        request: Request,
        exc: BookReviewError,
    ) -> JSONResponse:
        """Render application errors with their own status code."""
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Schema failures are client errors: 400 with the first message."""
        message = validation_message(exc)
        logger.debug(f"Validation failed on {request.url.path}: {message}")
        return error_response(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> JSONResponse:
        """Routing failures (unknown path, wrong method) in the error shape."""
        return error_response(
            exc.status_code,
            str(exc.detail),
            getattr(exc, "headers", None),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """
        Handle SQLAlchemy database errors.

        Logs the actual error for debugging while hiding details from users.
        """
        logger.error(f"Database error: {exc}")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "A database error occurred. Please try again later.",
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In debug mode the exception text is returned.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        message = str(exc) if settings.debug else "Internal server error"
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, message)

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(books_router, prefix=API_PREFIX)
    app.include_router(reviews_router, prefix=API_PREFIX)
    app.include_router(search_router, prefix=API_PREFIX)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API and its database are reachable.",
    )
    def health_check(db: DbSession) -> JSONResponse:
        """
        Health check endpoint.

        Used by load balancers and monitoring systems. Answers 503 when the
        database cannot be reached.
        """
        try:
            db.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as exc:
            logger.error(f"Health check database failure: {exc}")
            database = "unavailable"

        healthy = database == "ok"
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "app": settings.app_name,
                "version": __version__,
                "environment": settings.environment,
                "database": database,
                "rate_limiting": {
                    "enabled": settings.rate_limit_enabled,
                    "default_limit": settings.rate_limit_default,
                },
            },
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn bookreview.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# python -m bookreview.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookreview.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
