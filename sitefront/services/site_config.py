"""
Site config facade

Given a resolved TenantRef, return the tenant's public configuration:

    subdomain ref      → Site by subdomain
    custom_domain ref  → CustomDomain by exact domain → owning Site

favicon_url is resolved from the blob store at read time. Results are cached
per ref (see services.cache); callers can bypass the cache for a fresh read.
Configs are loaded from the local registry, or from a remote tenant-config
read service when SITE_CONFIG_BASE_URL is set.
"""
import logging
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from sitefront.crud import crud_custom_domain, crud_site
from sitefront.models.site import Site
from sitefront.schemas.site import SiteConfig
from sitefront.services.blob_store import LocalBlobStore
from sitefront.services.cache import SiteConfigCache, domain_tag, site_tags
from sitefront.services.hostnames import is_valid_subdomain
from sitefront.services.tenant_resolver import KIND_CUSTOM_DOMAIN, KIND_SUBDOMAIN, TenantRef

logger = logging.getLogger("sitefront.site_config")


def to_site_config(site: Site, blobs: LocalBlobStore) -> SiteConfig:
    return SiteConfig(
        name=site.name,
        subdomain=site.subdomain,
        title=site.title,
        description=site.description or "",
        primary_color=site.primary_color,
        secondary_color=site.secondary_color,
        favicon_url=blobs.url_for(site.favicon_asset_id),
    )


class RegistrySiteConfigLoader:
    """Reads configs from the local database (sync queries run in the threadpool)."""

    def __init__(self, db: Session, blobs: LocalBlobStore):
        self.db = db
        self.blobs = blobs

    async def load(self, ref: TenantRef) -> Optional[SiteConfig]:
        return await run_in_threadpool(self.load_sync, ref)

    def load_sync(self, ref: TenantRef) -> Optional[SiteConfig]:
        site: Optional[Site] = None

        if ref.kind == KIND_SUBDOMAIN:
            if not is_valid_subdomain(ref.value):
                return None
            site = crud_site.get_by_subdomain(self.db, ref.value)
        elif ref.kind == KIND_CUSTOM_DOMAIN:
            record = crud_custom_domain.get_by_domain(self.db, ref.value)
            if record is None:
                return None
            # orphaned domain rows (site deleted) resolve to nothing
            site = crud_site.get(self.db, record.site_id)

        if site is None:
            return None
        return to_site_config(site, self.blobs)


class RemoteSiteConfigLoader:
    """Reads configs from a remote tenant-config read service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def load(self, ref: TenantRef) -> Optional[SiteConfig]:
        if ref.kind == KIND_SUBDOMAIN:
            url, params = f"{self.base_url}/{quote(ref.value, safe='')}", None
        else:
            url, params = f"{self.base_url}/by-domain", {"domain": ref.value}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning("Site config request for %s failed: %s", ref.cache_key, e)
            return None

        if response.status_code != 200:
            logger.info("Site config request for %s returned %d", ref.cache_key, response.status_code)
            return None

        try:
            return SiteConfig.model_validate(response.json())
        except (SchemaError, ValueError):
            logger.warning("Malformed site config payload for %s", ref.cache_key)
            return None


class SiteConfigFacade:
    def __init__(self, loader, cache: SiteConfigCache):
        self.loader = loader
        self.cache = cache

    async def get_site_config(
        self, ref: Optional[TenantRef], bypass_cache: bool = False
    ) -> Optional[SiteConfig]:
        if ref is None:
            return None

        key = ref.cache_key
        if not bypass_cache:
            cached = await run_in_threadpool(self.cache.get, key)
            if cached is not None:
                return SiteConfig.model_validate(cached)

        config = await self.loader.load(ref)
        if config is None:
            return None

        tags = site_tags(config.subdomain)
        if ref.kind == KIND_CUSTOM_DOMAIN:
            tags.append(domain_tag(ref.value))
        await run_in_threadpool(self.cache.set, key, config.model_dump(), tags)
        return config
