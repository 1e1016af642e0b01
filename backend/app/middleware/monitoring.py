"""Monitoring and observability middleware"""
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from app.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "codecoach_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "codecoach_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Error metrics
http_errors_total = Counter(
    "codecoach_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)

# Auth metrics
authentication_failures_total = Counter(
    "codecoach_authentication_failures_total",
    "Total authentication failures",
    ["type"]  # login, token
)

auth_events_total = Counter(
    "codecoach_auth_events_total",
    "Successful auth lifecycle events",
    ["event"]  # register, admin_register, login, logout, delete_profile
)

# AI metrics
ai_requests_total = Counter(
    "codecoach_ai_requests_total",
    "Doubt-solving requests by outcome",
    ["outcome"]  # success, rejected, unavailable
)

ai_request_duration_seconds = Histogram(
    "codecoach_ai_request_duration_seconds",
    "Latency of the downstream completion call in seconds"
)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        method = request.method
        endpoint = request.url.path

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
            status = response.status_code

            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            # The AI proxy is expected to be slow; everything else is not
            if duration > 1.0 and not endpoint.startswith("/ai"):
                logger.warning(
                    f"Slow request detected: {method} {endpoint}",
                    extra={
                        "request_id": request_id,
                        "method": method,
                        "endpoint": endpoint,
                        "duration": duration,
                        "status": status
                    }
                )

            if status >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=status
                ).inc()

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception as e:
            duration = time.time() - start_time
            http_errors_total.labels(
                method=method,
                endpoint=endpoint,
                status=500
            ).inc()

            logger.error(
                f"Request failed: {method} {endpoint}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "endpoint": endpoint,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise


def record_auth_failure(auth_type: str):
    """Record authentication failure"""
    authentication_failures_total.labels(type=auth_type).inc()


def record_auth_event(event: str):
    auth_events_total.labels(event=event).inc()


def record_ai_request(outcome: str, duration: float = None):
    """Record a doubt-solving request and, if it reached the model, its latency"""
    ai_requests_total.labels(outcome=outcome).inc()
    if duration is not None:
        ai_request_duration_seconds.observe(duration)
