"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator

from airdealer import __version__
from airdealer.api import admins, auth, dashboard, health, orders
from airdealer.config import settings
from airdealer.exceptions import AirDealerError
from airdealer.middleware.rate_limit import limiter
from airdealer.utils.jwt_utils import get_private_key
from airdealer.utils.logger import logger, setup_logging

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the session signing key before the first sign-in needs it"""
    get_private_key()
    logger.info("AirDealer admin backend starting up", extra={
        "version": __version__,
        "database": "sqlite" if settings.is_sqlite else "postgresql",
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
        "session_ttl_seconds": settings.JWT_SESSION_EXPIRE_SECONDS
    })
    yield
    logger.info("AirDealer admin backend shutting down")


app = FastAPI(
    title="AirDealer Admin",
    description="Back-office API: administrator access gate and order status workflow",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.METRICS_ENABLED:
    from airdealer.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[settings.METRICS_PATH, "/health", "/health/ready", "/health/live"],
        inprogress_name="airdealer_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# The limiter decorates /auth/login and /auth/register; it does nothing when disabled
app.state.limiter = limiter

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(admins.router)
app.include_router(orders.router)
app.include_router(dashboard.router)


@app.get("/")
def root():
    return {
        "service": "AirDealer Admin",
        "version": __version__,
        "status": "operational",
        "docs": "/docs",
        "sign_in": "/auth/login",
        "gate_status": "/auth/status",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

@app.exception_handler(AirDealerError)
async def domain_exception_handler(request: Request, exc: AirDealerError):
    """Render domain errors as ``{error, category, message}`` with the error's own status"""
    if exc.status_code >= 500:
        logger.error(
            f"Service unavailable: {exc.message}",
            extra={"path": request.url.path, "method": request.method}
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "category": exc.category, "message": exc.message}
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown"
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "category": "retryable",
            "message": "Too many sign-in attempts. Please try again later.",
            "detail": str(exc.detail)
        }
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method
        },
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_server_error",
            "message": "An unexpected error occurred. Please contact support."
        }
    )
