"""
Request Logging Middleware

- Reuses an upstream X-Request-ID (edge proxy) or assigns a new one
- Logs one line per request with the resolved tenant, status and timing
- Health checks and metric scrapes are only timed, never logged
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from sitefront.logging_config import generate_request_id, request_id_ctx, tenant_id_ctx

logger = logging.getLogger("sitefront.request")

QUIET_PATHS = frozenset({"/health", "/metrics"})


def _tenant_label(request: Request) -> str:
    ref = getattr(request.state, "tenant_ref", None)
    return ref.cache_key if ref is not None else "-"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        rid = request.headers.get("x-request-id") or generate_request_id()
        request_id_ctx.set(rid)
        tenant_id_ctx.set("-")

        method = request.method
        path = request.url.path
        host = request.headers.get("host", "-")

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            logger.exception(
                "%s %s host=%s failed after %.1fms", method, path, host, elapsed
            )
            raise

        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = rid

        if path in QUIET_PATHS:
            return response

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s host=%s tenant=%s status=%d %.1fms",
            method, path, host, _tenant_label(request), response.status_code, elapsed,
        )
        return response
