"""Site mutations that span the registry, the blob store and the read cache."""
import logging
from typing import Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from sitefront.crud import crud_custom_domain, crud_site
from sitefront.exceptions import ValidationError
from sitefront.models.site import Site
from sitefront.schemas.site import SiteCreate, SiteUpdate
from sitefront.services.blob_store import LocalBlobStore
from sitefront.services.cache import SiteConfigCache
from sitefront.services.custom_domains import CustomDomainOrchestrator

logger = logging.getLogger("sitefront.sites")


def _check_favicon(blobs: LocalBlobStore, asset_id: Optional[str]) -> None:
    if asset_id and not blobs.exists(asset_id):
        raise ValidationError("Favicon asset does not exist; upload it first.")


def create_site(db: Session, obj_in: SiteCreate, blobs: LocalBlobStore) -> Site:
    _check_favicon(blobs, obj_in.favicon_asset_id)
    return crud_site.create(db, obj_in=obj_in)


def update_site(
    db: Session,
    site: Site,
    obj_in: SiteUpdate,
    blobs: LocalBlobStore,
    cache: SiteConfigCache,
) -> Site:
    old_subdomain = site.subdomain
    old_favicon = site.favicon_asset_id

    if "favicon_asset_id" in obj_in.model_fields_set:
        _check_favicon(blobs, obj_in.favicon_asset_id)

    site = crud_site.update(db, db_obj=site, obj_in=obj_in)

    if old_favicon and old_favicon != site.favicon_asset_id:
        blobs.delete(old_favicon)

    cache.invalidate_tags(*{f"site:{old_subdomain}", f"site:{site.subdomain}"})
    return site


async def delete_site(
    db: Session,
    site: Site,
    orchestrator: CustomDomainOrchestrator,
    blobs: LocalBlobStore,
    cache: SiteConfigCache,
) -> None:
    """Cascade: detach + delete every custom domain, release the favicon, delete the site."""
    for record in await run_in_threadpool(crud_custom_domain.get_multi_by_site, db, site.id):
        await orchestrator.remove_from_project(record.id)

    def _release() -> str:
        if site.favicon_asset_id:
            blobs.delete(site.favicon_asset_id)
        subdomain = site.subdomain
        crud_site.remove(db, db_obj=site)
        cache.invalidate_tags(f"site:{subdomain}")
        return subdomain

    subdomain = await run_in_threadpool(_release)
    logger.info("Site %s deleted", subdomain)
