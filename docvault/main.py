"""
FastAPI Application Entry Point
Main application with all routes and middleware
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, List

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from docvault.api.v1 import router as api_router
from docvault.core.config import settings
from docvault.core.exceptions import AppException
from docvault.core.logging import get_logger, setup_logging
from docvault.db.session import get_db_session
from docvault.middleware.ratelimit import RateLimitMiddleware, client_ip_key
from docvault.models.common import ErrorItem, ErrorResponse, HealthResponse, success
from docvault.monitoring import get_metrics, metrics_middleware

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan management"""
    logger.info("Starting DocVault document management API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")

    from docvault.db.session import close_db, init_db
    from docvault.storage.client import init_storage

    # Startup
    try:
        await init_db()
        init_storage()
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Document management API with versioning, per-document access control and Q&A",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)


# Request metrics
app.middleware("http")(metrics_middleware)

# GZip Middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)

# Rate limiting
app.add_middleware(
    RateLimitMiddleware,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    max_calls=settings.RATE_LIMIT_MAX_REQUESTS,
    key_func=client_ip_key,
    include_path_prefixes=("/api",),
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(
    status_code: int,
    message: str,
    code: str,
    errors: List[ErrorItem] = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


# Exception Handlers
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message} {exc.details}")
    else:
        logger.debug(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    response = error_response(exc.status_code, exc.message, exc.code)
    if "retry_after" in exc.details:
        response.headers["Retry-After"] = str(exc.details["retry_after"])
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions (unknown routes, wrong methods)"""
    message = str(exc.detail)
    return error_response(
        exc.status_code,
        message,
        message.lower().replace(" ", "_"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors with field-level messages"""
    errors = [
        ErrorItem(
            field=".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
            message=err["msg"],
        )
        for err in exc.errors()
    ]
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "validation_error",
        errors,
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Unique constraint and foreign key violations"""
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    return error_response(status.HTTP_409_CONFLICT, "Duplicate value", "duplicate_value")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback and answer 500"""
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Server Error",
        "internal_error",
    )


# Include routers
app.include_router(api_router, prefix="/api")


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "docs_url": "/docs" if settings.DEBUG else None,
    }


# Health check endpoint
@app.get("/api/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db_session)):
    """Health check endpoint"""
    health = HealthResponse(
        status="healthy",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        services={},
    )

    try:
        await db.execute(text("SELECT 1"))
        health.services["database"] = "healthy"
    except Exception as e:
        health.status = "degraded"
        health.services["database"] = f"unhealthy: {str(e)}"

    return success("API is running", health)


@app.get("/api/metrics", tags=["Health"])
async def prometheus_metrics():
    """
    Prometheus metrics endpoint

    Returns metrics in Prometheus exposition format for scraping by Prometheus server.
    """
    return Response(content=get_metrics(), media_type="text/plain")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docvault.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
