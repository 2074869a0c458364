"""
Tarifa - FastAPI Application

Main application entry point with health endpoints, middleware, exception
handlers and lifecycle management.
"""

from contextlib import asynccontextmanager
import time
import uuid

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from tarifa.api.dependencies import close_pricing_service, verify_pin_code
from tarifa.config.settings import settings
from tarifa.config.storage import storage_manager
from tarifa.integrations.pricing_apis import APIError
from tarifa.optimization.exceptions import InvalidInputError
from tarifa.optimization.exceptions import ValidationError as ApplianceValidationError
from tarifa.repositories.base import RedisKeyValueStore, RepositoryError

# Record application startup time for uptime calculation
_startup_time = time.time()


def configure_logging(production: bool) -> None:
    """JSON logs; outside production they also carry logger names and stack info"""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
    ]
    if not production:
        processors.append(structlog.stdlib.add_logger_name)
    processors += [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if not production:
        processors += [
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
        ]
    processors += [
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging(settings.is_production)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    # Startup
    logger.info("application_starting", environment=settings.environment)

    await storage_manager.initialize()

    logger.info("application_started", version=settings.app_version)

    yield

    # Shutdown
    logger.info("application_shutting_down")

    try:
        await close_pricing_service()
        await storage_manager.close()
        logger.info("connections_closed")
    except Exception as e:
        logger.error("shutdown_error", error=str(e))

    logger.info("application_stopped")


# Disable interactive API docs in production
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Hourly electricity prices and appliance scheduling",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan
)


# ============================================================================
# MIDDLEWARE
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID", "X-PIN-Code"],
)


# Request ID and Timing Middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add request ID and processing time to response headers"""
    request_id = str(uuid.uuid4())
    start_time = time.time()

    # Add request ID to structlog context
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    response = await call_next(request)

    process_time = time.time() - start_time
    response.headers["X-Request-ID"] = request_id
    if not settings.is_production:
        response.headers["X-Process-Time"] = str(process_time)

    logger.info(
        "request_completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        process_time=process_time
    )

    return response


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

def _error_response(status_code: int, detail, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, **extra})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report schema errors without echoing the request body"""
    # 'ctx' may hold the raw exception object, which is not JSON-serialisable
    errors = [
        {k: v for k, v in err.items() if k not in ("input", "ctx")}
        for err in exc.errors()
    ]
    logger.warning("validation_error", errors=errors, path=request.url.path)
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, errors)


@app.exception_handler(ApplianceValidationError)
async def appliance_validation_handler(request: Request, exc: ApplianceValidationError):
    logger.warning("appliance_invalid", errors=exc.errors, path=request.url.path)
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, errors=exc.errors
    )


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    """Appliances sent for optimization without a price curve"""
    logger.warning("optimization_input_invalid", error=exc.message, path=request.url.path)
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message)


@app.exception_handler(APIError)
async def price_feed_error_handler(request: Request, exc: APIError):
    """Price feed down and nothing cached to fall back on"""
    logger.error(
        "price_feed_unavailable",
        error=str(exc),
        status_code=exc.status_code,
        path=request.url.path,
    )
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Electricity prices are currently unavailable",
    )


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error("storage_error", error=exc.message, path=request.url.path)
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, "Storage is currently unavailable"
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Unexpected errors; details are hidden in production"""
    logger.error(
        "unexpected_error",
        error=str(exc),
        path=request.url.path,
        method=request.method
    )
    detail = "Internal server error" if settings.is_production else str(exc)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


# ============================================================================
# HEALTH CHECK ENDPOINTS
# ============================================================================

@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check endpoint with deployment metadata"""
    uptime_seconds = time.time() - _startup_time

    storage_status = "in_memory"
    store = storage_manager.store
    if isinstance(store, RedisKeyValueStore):
        try:
            storage_status = "connected" if await store.ping() else "disconnected"
        except Exception as e:
            logger.warning("redis_health_check_failed", error=str(e))
            storage_status = "disconnected"

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "uptime_seconds": round(uptime_seconds, 2),
        "storage_status": storage_status,
    }


@app.get("/health/live", tags=["Health"])
async def liveness_check():
    """Liveness check - verify application is running"""
    return {"status": "alive"}


# ============================================================================
# API ROUTES
# ============================================================================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    info = {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "health": "/health",
        "pin_required": settings.pin_code is not None,
    }
    if not settings.is_production:
        info["docs"] = "/docs"
    return info


# Import and include API routers
from tarifa.api.v1 import appliances as appliances_v1
from tarifa.api.v1 import optimization as optimization_v1
from tarifa.api.v1 import preferences as preferences_v1
from tarifa.api.v1 import prices as prices_v1

# Every API route sits behind the optional PIN
_protected = [Depends(verify_pin_code)]

app.include_router(
    prices_v1.router,
    prefix=f"{settings.api_prefix}/prices",
    tags=["Prices"],
    dependencies=_protected,
)

app.include_router(
    appliances_v1.router,
    prefix=f"{settings.api_prefix}/appliances",
    tags=["Appliances"],
    dependencies=_protected,
)

app.include_router(
    optimization_v1.router,
    prefix=f"{settings.api_prefix}/optimization",
    tags=["Optimization"],
    dependencies=_protected,
)

app.include_router(
    preferences_v1.router,
    prefix=f"{settings.api_prefix}/preferences",
    tags=["Preferences"],
    dependencies=_protected,
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tarifa.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
