"""
Prometheus Metrics

Exposes:
  - http_requests_total               (counter)
  - http_request_duration_seconds     (histogram)
  - http_requests_in_progress         (gauge)
  - tenant_resolutions_total          (counter, by resolved kind)
  - domain_provider_calls_total       (counter, by operation / outcome)
  - app_info                          (info)
"""

import re
import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# ── HTTP metrics ──
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of in-progress requests",
    ["method"],
)
APP_INFO = Info("app", "Application metadata")

# ── Domain metrics ──
TENANT_RESOLUTIONS = Counter(
    "tenant_resolutions_total",
    "Host header resolutions by outcome",
    ["kind"],  # subdomain / custom_domain / none
)
PROVIDER_CALLS = Counter(
    "domain_provider_calls_total",
    "Calls to the external domain provider",
    ["operation", "outcome"],  # attach / fetch_config / detach ; ok / error
)

_UUID = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


def _normalize_path(path: str) -> str:
    """Collapse ids to keep label cardinality bounded."""
    path = _UUID.sub("{id}", path)
    path = re.sub(r"/\d+", "/{id}", path)
    path = re.sub(r"/(uploads|files)/[^/]+", r"/\1/{id}", path)
    # public tenant lookups: /{subdomain}
    if path.count("/") == 1 and path not in ("/", "/health", "/metrics", "/by-domain"):
        return "/{subdomain}"
    return path


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        method = request.method
        path = _normalize_path(request.url.path)

        # Skip metrics endpoint itself
        if path == "/metrics":
            return await call_next(request)

        REQUESTS_IN_PROGRESS.labels(method=method).inc()
        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            REQUEST_DURATION.labels(method=method, endpoint=path).observe(
                time.perf_counter() - start
            )
            REQUEST_COUNT.labels(method=method, endpoint=path, status=str(status)).inc()
            REQUESTS_IN_PROGRESS.labels(method=method).dec()


async def metrics_endpoint(request: Request) -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def set_app_info(version: str, env: str) -> None:
    APP_INFO.info({"version": version, "env": env})
