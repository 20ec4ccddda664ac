"""
Public Tenant Config API

Unauthenticated read endpoints used by tenant front-ends:

  GET /{subdomain}            config by wildcard subdomain
  GET /by-domain?domain=X     config by customer-owned domain
  GET /api/site               config for the tenant the Host header resolves to
  GET /api/favicon            302 to the tenant's favicon, 204 when none

Send `Cache-Control: no-cache` to bypass the config cache.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from sitefront.api import deps
from sitefront.exceptions import ValidationError
from sitefront.schemas.site import SiteConfig
from sitefront.services.hostnames import (
    RESERVED_SUBDOMAINS,
    is_valid_subdomain,
    normalize_domain,
)
from sitefront.services.site_config import SiteConfigFacade
from sitefront.services.tenant_resolver import KIND_CUSTOM_DOMAIN, KIND_SUBDOMAIN, TenantRef

router = APIRouter()
tenant_router = APIRouter()

INVALID_SUBDOMAIN = (
    "Invalid subdomain. Use only letters, numbers and dashes, do not start or end "
    "with a dash, and avoid reserved names like admin or www."
)
CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}


def _bypass_cache(request: Request) -> bool:
    return "no-cache" in request.headers.get("cache-control", "").lower()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


def _config_response(config: Optional[SiteConfig]) -> JSONResponse:
    if config is None:
        return _error(404, "Site not found")
    return JSONResponse(config.model_dump(by_alias=True), headers=CORS_HEADERS)


# ── Wildcard / custom-domain lookups (mounted at "/") ──

@router.get("/by-domain", response_model=SiteConfig)
async def get_site_by_domain(
    request: Request,
    domain: str = Query(""),
    facade: SiteConfigFacade = Depends(deps.get_site_config_facade),
) -> Any:
    try:
        host = normalize_domain(domain)
    except ValidationError as e:
        return _error(400, e.message)

    config = await facade.get_site_config(
        TenantRef(kind=KIND_CUSTOM_DOMAIN, value=host), bypass_cache=_bypass_cache(request)
    )
    return _config_response(config)


@router.get("/{subdomain}", response_model=SiteConfig)
async def get_site_by_subdomain(
    subdomain: str,
    request: Request,
    facade: SiteConfigFacade = Depends(deps.get_site_config_facade),
) -> Any:
    subdomain = subdomain.strip().lower()
    if not is_valid_subdomain(subdomain) or subdomain in RESERVED_SUBDOMAINS:
        return _error(400, INVALID_SUBDOMAIN)

    config = await facade.get_site_config(
        TenantRef(kind=KIND_SUBDOMAIN, value=subdomain), bypass_cache=_bypass_cache(request)
    )
    return _config_response(config)


# ── Host-resolved tenant (mounted at "/api") ──

async def _site_for_request(request: Request, facade: SiteConfigFacade) -> Optional[SiteConfig]:
    ref = getattr(request.state, "tenant_ref", None)
    return await facade.get_site_config(ref, bypass_cache=_bypass_cache(request))


@tenant_router.get("/site", response_model=SiteConfig)
async def get_current_site(
    request: Request,
    facade: SiteConfigFacade = Depends(deps.get_site_config_facade),
) -> Any:
    return _config_response(await _site_for_request(request, facade))


@tenant_router.get("/favicon")
async def get_favicon(
    request: Request,
    facade: SiteConfigFacade = Depends(deps.get_site_config_facade),
) -> Response:
    site = await _site_for_request(request, facade)
    if site is None or not site.favicon_url:
        # empty response so browsers stop retrying default locations
        return Response(status_code=204)
    return RedirectResponse(site.favicon_url, status_code=302)
