from functools import lru_cache
from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from sitefront.config import provider_settings_from, settings
from sitefront.db.session import SessionLocal
from sitefront.exceptions import ForbiddenError
from sitefront.services.blob_store import LocalBlobStore
from sitefront.services.cache import SiteConfigCache
from sitefront.services.custom_domains import CustomDomainOrchestrator
from sitefront.services.domain_provider import DomainProviderGateway
from sitefront.services.site_config import (
    RegistrySiteConfigLoader,
    RemoteSiteConfigLoader,
    SiteConfigFacade,
)


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def verify_service_token(request: Request) -> None:
    """
    Admin endpoints sit behind the dashboard / gateway, which forwards an
    internal service token. No token configured = development, no check.
    """
    if not settings.ADMIN_SERVICE_TOKEN:
        return
    token = request.headers.get("X-Service-Token", "")
    if token != settings.ADMIN_SERVICE_TOKEN:
        raise ForbiddenError("Invalid service token")


@lru_cache
def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL)


@lru_cache
def get_site_cache() -> SiteConfigCache:
    return SiteConfigCache.from_url(settings.SITE_CACHE_REDIS_URL, ttl=settings.SITE_CONFIG_CACHE_TTL)


@lru_cache
def get_domain_provider() -> DomainProviderGateway:
    return DomainProviderGateway(provider_settings_from(settings))


def get_site_config_facade(
    db: Session = Depends(get_db),
    blobs: LocalBlobStore = Depends(get_blob_store),
    cache: SiteConfigCache = Depends(get_site_cache),
) -> SiteConfigFacade:
    if settings.SITE_CONFIG_BASE_URL:
        loader = RemoteSiteConfigLoader(
            settings.SITE_CONFIG_BASE_URL, timeout=settings.SITE_CONFIG_REMOTE_TIMEOUT
        )
    else:
        loader = RegistrySiteConfigLoader(db, blobs)
    return SiteConfigFacade(loader, cache)


def get_orchestrator(
    db: Session = Depends(get_db),
    gateway: DomainProviderGateway = Depends(get_domain_provider),
    cache: SiteConfigCache = Depends(get_site_cache),
) -> CustomDomainOrchestrator:
    return CustomDomainOrchestrator(
        db, gateway, cache=cache, retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS
    )
