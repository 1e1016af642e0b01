"""FastAPI application entry point"""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from prometheus_fastapi_instrumentator import Instrumentator

from app.api import ai, auth, health
from app.config import settings
from app.database import SessionLocal
from app.middleware.rate_limit import limiter
from app.utils.blocklist import SqlTokenBlocklist
from app.utils.errors import ServiceUnavailableError, ValidationError
from app.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


def purge_expired_tokens() -> None:
    """Sweep blocklist entries whose tokens have expired."""
    db = SessionLocal()
    try:
        deleted = SqlTokenBlocklist(db).purge_expired()
        logger.info(f"Purged {deleted} expired blocklist entries", extra={"action": "purge_blocklist"})
    except (ServiceUnavailableError, SQLAlchemyError) as e:
        logger.warning(f"Blocklist purge skipped: {e}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info("CodeCoach backend starting up", extra={
        "version": "0.1.0",
        "environment": settings.ENVIRONMENT,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
        "ai_configured": bool(settings.ANTHROPIC_API_KEY),
    })
    purge_expired_tokens()
    yield
    # Shutdown
    logger.info("CodeCoach backend shutting down")


app = FastAPI(
    title="CodeCoach",
    description="Authentication and AI doubt solving for the CodeCoach practice platform",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# ===== Middleware Setup =====

# CORS - the frontend sends the session cookie cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    from app.middleware.monitoring import MonitoringMiddleware
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="codecoach_requests_inprogress",
        inprogress_labels=True
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# Rate limiting
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else "unknown"
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please try again later.",
            "detail": str(exc.detail)
        }
    )

# ===== Route Setup =====

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(ai.router)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "CodeCoach",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None
    }


# ===== Error Handlers =====

# Registration reports malformed bodies the same way as failed validation
REGISTRATION_PATHS = {"/user/register", "/user/admin/register"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return 400 for unparseable registration bodies, 422 elsewhere"""
    if request.url.path not in REGISTRATION_PATHS:
        return await request_validation_exception_handler(request, exc)

    logger.info(
        "Rejected malformed registration body",
        extra={"path": request.url.path, "error": str(exc.errors())},
    )
    return JSONResponse(
        status_code=400,
        content={"detail": f"Error: {ValidationError.message}"}
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
