"""
FastAPI application entry point.
Main application setup and configuration.
"""

from datetime import datetime, timezone
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
import logging

from app.config import settings
from app.database import test_database_connection, close_db_connection, create_tables
from app.routers import (
    properties_router,
    inquiries_router,
    favorites_router,
    admin_router,
    contact_router,
    files_router
)
from app.utils.exceptions import APIException
from app.utils.file_utils import MODEL_MIME_TYPES
from app.services.error_handler import ErrorHandlerService
from app.services.storage import select_storage_backend
from app.middleware.validation import ValidationMiddleware

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class UploadStaticFiles(StaticFiles):
    """Static upload files; 3D models get their glTF MIME type and an open CORS header."""

    def file_response(self, full_path, stat_result, scope, status_code=200):
        response = super().file_response(full_path, stat_result, scope, status_code)

        media_type = MODEL_MIME_TYPES.get(Path(str(full_path)).suffix.lower())
        if media_type:
            response.headers["content-type"] = media_type
            response.headers["access-control-allow-origin"] = "*"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    db_connected = await test_database_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")
    elif settings.is_development:
        await create_tables()

    select_storage_backend()

    yield

    # Shutdown
    logger.info("Shutting down application")
    await close_db_connection()


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Backend for a real-estate marketplace.

    ## Features

    * **Listings**: Property CRUD with images and 3D models, search and similar listings
    * **Storage**: Local disk, chunked database blob store or Cloudinary
    * **Inquiries**: Public lead capture with email notification of the owner
    * **Favorites**: Buyers keep a list of saved properties
    * **Admin**: Dashboard analytics, buyer moderation and status overrides

    ## Authentication

    Sessions are issued by the identity provider. Send its JWT in the Authorization
    header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Properties", "description": "Listing management and search"},
        {"name": "Inquiries", "description": "Buyer inquiries on listings"},
        {"name": "Favorites", "description": "Buyer favorites"},
        {"name": "Admin", "description": "Analytics and moderation"},
        {"name": "Contact", "description": "Public contact form"},
        {"name": "Files", "description": "Blob store downloads"},
        {"name": "Health", "description": "Service status"}
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

# Add validation middleware
app.add_middleware(
    ValidationMiddleware,
    max_request_size=settings.max_request_size,
    enable_request_logging=not settings.is_testing
)

# Include API routers
app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(inquiries_router, prefix=settings.api_prefix)
app.include_router(favorites_router, prefix=settings.api_prefix)
app.include_router(admin_router, prefix=settings.api_prefix)
app.include_router(contact_router, prefix=settings.api_prefix)
app.include_router(files_router, prefix=settings.api_prefix)

app.mount("/uploads", UploadStaticFiles(directory=settings.upload_dir), name="uploads")


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors as 400 with field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle FastAPI HTTP exceptions with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions: raw message, plus a trace outside production."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint providing basic API information.
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get(f"{settings.api_prefix}/health", tags=["Health"])
async def health_check():
    """
    Health check with database connectivity and integration status.
    Used by container health checks and load balancers.
    """
    db_healthy = await test_database_connection()

    return {
        "status": "healthy" if db_healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": "connected" if db_healthy else "disconnected",
        "storage_backend": settings.storage_backend,
        "cloudinary_configured": settings.cloudinary_configured,
        "mail_configured": settings.mail_configured
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
