"""
Degree Planner Main Application
FastAPI shell around the course graph, plan and eligibility services
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import time

from degree_planner.core.config import get_settings, validate_configuration
from degree_planner.core.dependencies import cleanup_resources, get_service_health
from degree_planner.core.exceptions import (
    CycleError,
    DegreePlannerError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from degree_planner.core.logging_config import configure_logging
from degree_planner.models.requests import ErrorResponse, HealthCheckResponse

# Get settings
settings = get_settings()

# Configure logging
configure_logging(settings)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ValidationError: 400,
    CycleError: 400,
    NotFoundError: 404,
    DuplicateError: 409,
}


def status_for(exc: DegreePlannerError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    # Validate configuration
    try:
        validate_configuration(settings)
        logger.info("Configuration validation passed")
    except ValueError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await cleanup_resources()
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Course prerequisite graph and degree plan eligibility service",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure based on environment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests for monitoring"""
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID", "unknown")

    logger.info(f"Request {request_id}: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        f"Response {request_id}: {response.status_code} in {process_time:.3f}s"
    )
    return response


@app.exception_handler(DegreePlannerError)
async def domain_exception_handler(request: Request, exc: DegreePlannerError):
    """Map domain errors to client responses"""
    request_id = request.headers.get("X-Request-ID", "unknown")
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(f"Domain error in request {request_id}: {exc.message}")
    else:
        logger.info(f"Request {request_id} rejected ({status_code}): {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            message=exc.message,
            code=exc.code,
            details=exc.details or None,
            request_id=request_id,
        ).model_dump(mode="json"),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    request_id = request.headers.get("X-Request-ID", "unknown")

    logger.error(
        f"Unhandled exception in request {request_id}: {str(exc)}", exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred" if not settings.debug else str(exc),
            request_id=request_id,
        ).model_dump(mode="json"),
    )


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": f"Welcome to {settings.app_name} v{settings.app_version}",
        "environment": settings.environment,
        "status": "healthy",
        "docs_url": "/docs" if settings.debug else "disabled",
    }


# Health check endpoint
@app.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Health check endpoint"""
    try:
        services_health = await get_service_health()

        # Determine overall status
        overall_status = "healthy"
        for service_status in services_health.values():
            if "unhealthy" in service_status.lower():
                overall_status = "degraded"
                break

        return HealthCheckResponse(
            status=overall_status,
            version=settings.app_version,
            environment=settings.environment.value,
            services=services_health,
        )

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return HealthCheckResponse(
            status="unhealthy",
            version=settings.app_version,
            environment=settings.environment.value,
            services={"error": str(e)},
        )


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "degree_planner.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level="info" if not settings.debug else "debug",
    )
