"""
DockerX CMS API - Main FastAPI Application.

Public posts, admin post management, uploads and image delivery.
"""

import time
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.config import Settings, get_settings
from src.core.exceptions import CMSAPIError
from src.core.logging import RequestLogger, configure_logging, get_logger
from src.db.session import close_db, get_db, init_db
from src.models.common import ErrorDetail, ErrorResponse, HealthResponse
from src.services.storage.factory import get_storage_provider, reset_storage_provider
from src.services.storage.service import StorageService, get_storage_service

from src.api.routers import admin_posts, auth, media, posts, store


logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    def __init__(self, app) -> None:
        super().__init__(app)
        self.request_logger = RequestLogger()

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        client_ip = request.client.host if request.client else None
        self.request_logger.log_request(request.method, request.url.path, client_ip)

        response = await call_next(request)

        self.request_logger.log_response(
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()

    # Startup
    configure_logging(settings)
    logger.info("starting_application", env=settings.app_env)

    # A misconfigured storage provider stops startup
    provider = get_storage_provider(settings)

    try:
        await init_db(settings)
        logger.info("database_connected")
    except Exception as e:
        logger.error("database_connection_failed", error=str(e))

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await provider.close()
    reset_storage_provider()
    await close_db()


def error_response(request: Request, status_code: int, detail: ErrorDetail) -> JSONResponse:
    """Build the JSON error envelope."""
    detail.path = str(request.url.path)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=detail).model_dump(mode="json"),
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. Uses default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
# DockerX CMS API

Content backend for posts and their media.

## Features

- Public read access to posts, with paging
- Admin create, update and delete of posts with an attached image
- Standalone file uploads to local disk, S3 or Azure Blob storage
- Image delivery with resize and crop parameters

## Authentication

Admin endpoints require a bearer token from `POST /api/auth/login`.

```
Authorization: Bearer <token>
```
        """,
        version=settings.app_version,
        docs_url="/docs" if settings.app_debug else None,
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Auth", "description": "Admin login and token validation"},
            {"name": "Posts", "description": "Public read access to posts"},
            {"name": "Admin", "description": "Post management"},
            {"name": "Store", "description": "File uploads and downloads"},
            {"name": "Media", "description": "Image delivery"},
            {"name": "Health", "description": "Health check endpoints"},
        ],
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    @app.exception_handler(CMSAPIError)
    async def cms_error_handler(request: Request, exc: CMSAPIError) -> JSONResponse:
        """Handle CMS API errors. Server-side failures hide their details."""
        if exc.status_code >= 500:
            logger.error(
                "request_failed",
                path=request.url.path,
                error_code=exc.error_code,
                error=exc.message,
                details=exc.details,
            )
            return error_response(
                request,
                exc.status_code,
                ErrorDetail(code=exc.error_code, message="An internal error occurred"),
            )

        return error_response(
            request,
            exc.status_code,
            ErrorDetail(
                code=exc.error_code,
                message=exc.message,
                details=exc.details or None,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle validation errors."""
        errors = []
        for error in exc.errors():
            errors.append({
                "loc": list(error.get("loc", [])),
                "msg": error.get("msg", ""),
                "type": error.get("type", ""),
            })

        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            ErrorDetail(
                code="VALIDATION_ERROR",
                message="Request validation failed",
                details={"errors": errors},
            ),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected errors."""
        logger.exception("unhandled_error", path=request.url.path)

        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorDetail(code="INTERNAL_ERROR", message="An unexpected error occurred"),
        )

    # Include routers
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(admin_posts.router)
    app.include_router(store.router)
    app.include_router(media.router)

    # Health endpoints
    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="Health check",
        description="Check API health and dependent services status.",
    )
    async def health_check(
        db: Annotated[AsyncSession, Depends(get_db)],
        storage: Annotated[StorageService, Depends(get_storage_service)],
    ) -> HealthResponse:
        """Check API health."""
        services: dict[str, str] = {}

        try:
            await db.execute(text("SELECT 1"))
            services["database"] = "healthy"
        except Exception as e:
            logger.warning("database_health_check_failed", error=str(e))
            services["database"] = "unavailable"

        try:
            await storage.provider.list_files(storage.container)
            services[f"storage:{storage.provider_name}"] = "healthy"
        except Exception as e:
            logger.warning("storage_health_check_failed", error=str(e))
            services[f"storage:{storage.provider_name}"] = "unavailable"

        # Overall status
        all_healthy = all(s == "healthy" for s in services.values())

        return HealthResponse(
            status="healthy" if all_healthy else "degraded",
            version=settings.app_version,
            services=services,
        )

    @app.get(
        "/",
        include_in_schema=False,
    )
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/redoc",
            "openapi": "/openapi.json",
        }

    return app


# Create default application instance
app = create_app()


def main() -> None:
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.app_host,
        port=settings.app_port,
        workers=settings.app_workers,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    main()
