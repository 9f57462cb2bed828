"""Monitoring and observability middleware"""
import time
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from airdealer.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "airdealer_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "airdealer_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Domain metrics
order_transitions_total = Counter(
    "airdealer_order_transitions_total",
    "Order status transition attempts",
    ["to_status", "outcome"]  # outcome: applied, illegal, conflict
)

gate_classifications_total = Counter(
    "airdealer_gate_classifications_total",
    "Access gate classifications",
    ["state"]
)

authentication_failures_total = Counter(
    "airdealer_authentication_failures_total",
    "Total authentication failures",
    ["type"]  # password, session
)


def _endpoint_label(request: Request) -> str:
    """Route template (``/orders/{order_id}``) rather than the raw path"""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for request metrics, request IDs and slow-request logging"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        method = request.method

        request_id = request.headers.get("x-request-id", f"req_{int(time.time() * 1000)}")
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {request.url.path}",
                extra={"request_id": request_id, "error": str(e)},
                exc_info=True
            )
            raise

        duration = time.time() - start_time
        endpoint = _endpoint_label(request)

        http_requests_total.labels(method=method, endpoint=endpoint, status=response.status_code).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

        if duration > 1.0:
            logger.warning(
                f"Slow request detected: {method} {endpoint}",
                extra={"request_id": request_id, "duration": duration, "status": response.status_code}
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response


def record_order_transition(to_status: str, outcome: str):
    """Record an order transition attempt"""
    order_transitions_total.labels(to_status=to_status, outcome=outcome).inc()


def record_gate_classification(state: str):
    """Record an access gate outcome"""
    gate_classifications_total.labels(state=state).inc()


def record_auth_failure(auth_type: str):
    """Record authentication failure"""
    authentication_failures_total.labels(type=auth_type).inc()
