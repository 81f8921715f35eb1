"""
Middleware for collecting HTTP request metrics
"""
import re
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from depin.core.logging_config import LoggingConfig
from depin.core.metrics import (http_errors_total,
                                http_request_duration_seconds,
                                http_requests_total)

logger = LoggingConfig.get_logger(__name__)

# Device and submission keys are 64 hex characters
_KEY_SEGMENT = re.compile(r"^[0-9a-f]{64}$")


def normalize_endpoint(path: str) -> str:
    """Replace record keys in a path so metrics aggregate per route"""
    if not path.startswith("/api/"):
        return path
    return "/".join("{key}" if _KEY_SEGMENT.match(part) else part for part in path.split("/"))


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics for Prometheus
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        status_code = 500
        error_type = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            error_type = type(e).__name__
            raise
        finally:
            duration = time.time() - start_time
            endpoint = normalize_endpoint(request.url.path)
            method = request.method
            status_code_str = str(status_code)

            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).observe(duration)

            if status_code >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status_code=status_code_str,
                    error_type=error_type or f"http_{status_code}"
                ).inc()
