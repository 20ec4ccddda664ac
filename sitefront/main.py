import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sitefront.api.v1.api import api_router
from sitefront.api.v1.endpoints import files, public
from sitefront.config import resolver_config_from, settings
from sitefront.db.session import get_pool_status
from sitefront.exceptions import SiteFrontError
from sitefront.logging_config import setup_logging
from sitefront.middleware.metrics import PrometheusMiddleware, metrics_endpoint, set_app_info
from sitefront.middleware.request_logging import RequestLoggingMiddleware
from sitefront.middleware.tenant_resolution import FaviconRewriteMiddleware, TenantResolutionMiddleware

# ── Initialize structured logging ──
setup_logging()
logger = logging.getLogger("sitefront")

app = FastAPI(
    title=settings.APP_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

cors_origins = [origin.strip() for origin in settings.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Host header → request.state.tenant_ref
app.add_middleware(TenantResolutionMiddleware, config=resolver_config_from(settings))

# /favicon.ico → /api/favicon
app.add_middleware(FaviconRewriteMiddleware)

# Prometheus metrics middleware – request count, latency, in-progress
app.add_middleware(PrometheusMiddleware)

# Request logging middleware – request ID, timing
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(SiteFrontError)
async def sitefront_error_handler(request: Request, exc: SiteFrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s on %s %s: %s", exc.__class__.__name__, request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.APP_ENV, "db_pool": get_pool_status()}


# Prometheus metrics endpoint
app.add_route("/metrics", metrics_endpoint)
set_app_info(version="1.0.0", env=settings.APP_ENV)

# Mount admin API v1
app.include_router(api_router, prefix=settings.API_V1_STR)

# Host-resolved tenant endpoints + blob downloads
app.include_router(public.tenant_router, prefix="/api", tags=["tenant"])
app.include_router(files.files_router, tags=["files"])

# Catch-all tenant lookups (/{subdomain}) last so they never shadow the routes above
app.include_router(public.router, tags=["public"])
