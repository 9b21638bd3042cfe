"""
FastAPI Main Application
YouTube Comment Analytics
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from comment_analytics import __version__
from comment_analytics.api.routers import analytics_router, comments_router
from comment_analytics.app.config import get_config, setup_logging, validate_config
from comment_analytics.app.dependencies import close_clients
from comment_analytics.services.exceptions import (
    RateLimitExceededError,
    ServiceError,
    error_to_http_status,
    is_client_error,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle Management
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    # ========== STARTUP ==========
    config = get_config()
    setup_logging(config)
    logger.info("🚀 Starting YouTube Comment Analytics...")

    validation_result = validate_config(config)
    if not validation_result["valid"]:
        logger.error("❌ Configuration validation failed!")
        for error in validation_result["errors"]:
            logger.error(f"  - {error}")
        raise RuntimeError("Invalid configuration")

    for warning in validation_result["warnings"]:
        logger.warning(f"  ⚠️  {warning}")

    logger.info("✅ Configuration loaded and validated")
    _log_startup_summary(config)

    yield

    # ========== SHUTDOWN ==========
    logger.info("🛑 Shutting down application...")
    await close_clients()
    logger.info("✅ Application shutdown complete")


def _log_startup_summary(config) -> None:
    summary = config.get_summary()
    logger.info(
        f"📋 API {config.api.host}:{config.api.port} | "
        f"LLM key set: {summary['llm']['api_key_set']} | "
        f"stub classifier: {summary['pipeline']['stub_classifier']} | "
        f"docs: /docs"
    )


# ============================================================================
# FastAPI Application Instance
# ============================================================================


def create_app() -> FastAPI:
    """
    FastAPI application factory
    Creates and configures the FastAPI application
    """
    config = get_config()

    app = FastAPI(
        title="YouTube Comment Analytics",
        description="Comment sentiment pipeline and engagement analytics for YouTube videos",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=config.api.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    _register_routers(app)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers"""

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        """Map typed service errors onto HTTP status codes"""
        status_code = error_to_http_status(exc)

        if is_client_error(exc):
            logger.info(f"Client error on {request.url.path}: {exc.message}")
            return JSONResponse(status_code=status_code, content=exc.to_dict())

        if isinstance(exc, RateLimitExceededError):
            logger.warning(f"⚠️ Upstream rate limit: {exc.message}")
            headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
            return JSONResponse(
                status_code=status_code,
                content={"error": exc.error_code, "message": "Upstream rate limit reached"},
                headers=headers,
            )

        logger.exception(f"❌ Service error on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error": exc.error_code,
                "message": "Upstream service failed, please retry later",
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions"""
        logger.error(f"HTTP error: {exc.status_code} - {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.detail,
                "status_code": exc.status_code,
                "path": request.url.path,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors"""
        logger.info(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation Error",
                "details": _jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": "An unexpected error occurred",
                "path": request.url.path,
            },
        )


def _jsonable_errors(exc: RequestValidationError):
    """Strip non-serializable context (e.g. exception objects) from pydantic errors"""
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


def _register_routers(app: FastAPI) -> None:
    """Register API routers"""

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint"""
        config = get_config()
        return {
            "status": "healthy",
            "version": __version__,
            "youtube_api_key_set": bool(config.youtube_api.api_key),
            "llm_api_key_set": bool(config.llm.api_key),
        }

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API information"""
        return {
            "message": "YouTube Comment Analytics API",
            "version": __version__,
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/health",
        }

    app.include_router(comments_router)
    app.include_router(analytics_router)

    logger.info("✅ API routers registered")


# ============================================================================
# Application Instance
# ============================================================================

app = create_app()


# ============================================================================
# Development Server Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    config = get_config()

    uvicorn.run(
        "comment_analytics.app.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.debug,
        log_level=config.logging.level.lower(),
    )
