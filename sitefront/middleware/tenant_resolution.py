"""
Tenant Resolution Middleware

Resolves the tenant from the Host header (wildcard subdomain or custom domain)
and sets request.state.tenant_ref for downstream handlers. Never fails a
request: an unresolvable host simply leaves tenant_ref = None.
"""

import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from sitefront.config import ResolverConfig
from sitefront.logging_config import tenant_id_ctx
from sitefront.middleware.metrics import TENANT_RESOLUTIONS
from sitefront.services.tenant_resolver import resolve_request_tenant

logger = logging.getLogger("sitefront.domain")


class TenantResolutionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, config: ResolverConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next) -> Response:
        ref = resolve_request_tenant(request.headers.get("host"), self.config.wildcard_roots)
        request.state.tenant_ref = ref

        if ref is not None:
            tenant_id_ctx.set(ref.cache_key)
            logger.debug("Resolved host %s → %s", request.headers.get("host"), ref.cache_key)
        TENANT_RESOLUTIONS.labels(kind=ref.kind if ref else "none").inc()

        return await call_next(request)


class FaviconRewriteMiddleware(BaseHTTPMiddleware):
    """Serve legacy /favicon.ico requests from the dynamic favicon endpoint."""

    def __init__(self, app: ASGIApp, target: str = "/api/favicon"):
        super().__init__(app)
        self.target = target

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == "/favicon.ico":
            request.scope["path"] = self.target
            request.scope["raw_path"] = self.target.encode()
        return await call_next(request)
