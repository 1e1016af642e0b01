"""Middleware modules for production-ready features"""
from app.middleware.monitoring import (
    MonitoringMiddleware,
    record_ai_request,
    record_auth_event,
    record_auth_failure,
)
from app.middleware.rate_limit import limiter, get_rate_limit

__all__ = [
    "MonitoringMiddleware",
    "record_ai_request",
    "record_auth_event",
    "record_auth_failure",
    "limiter",
    "get_rate_limit"
]
