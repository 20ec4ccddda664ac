from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from sitefront.api import deps
from sitefront.config import settings
from sitefront.crud import crud_site
from sitefront.exceptions import NotFoundError
from sitefront.models.site import Site as SiteModel
from sitefront.schemas.site import Site, SiteCreate, SiteUpdate, UploadUrl
from sitefront.services import sites as site_service
from sitefront.services.blob_store import LocalBlobStore
from sitefront.services.cache import SiteConfigCache
from sitefront.services.custom_domains import CustomDomainOrchestrator

router = APIRouter()


def _to_schema(site: SiteModel, blobs: LocalBlobStore) -> Site:
    out = Site.model_validate(site)
    out.favicon_url = blobs.url_for(site.favicon_asset_id)
    return out


def _get_or_404(db: Session, site_id: UUID) -> SiteModel:
    site = crud_site.get(db, site_id)
    if not site:
        raise NotFoundError("Site not found")
    return site


@router.get("/", response_model=List[Site])
def read_sites(
    db: Session = Depends(deps.get_db),
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
    skip: int = 0,
    limit: int = 100,
) -> Any:
    """List sites, newest first, with resolved favicon URLs."""
    return [_to_schema(s, blobs) for s in crud_site.get_multi(db, skip=skip, limit=limit)]


@router.post("/", response_model=Site, status_code=201)
def create_site(
    *,
    db: Session = Depends(deps.get_db),
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
    site_in: SiteCreate,
) -> Any:
    site = site_service.create_site(db, site_in, blobs)
    return _to_schema(site, blobs)


@router.post("/upload-url", response_model=UploadUrl)
def generate_upload_url(
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
) -> Any:
    """One-time URL the dashboard POSTs the favicon bytes to."""
    ticket = blobs.issue_upload_ticket()
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    return UploadUrl(upload_url=f"{base}{settings.API_V1_STR}/uploads/{ticket}")


@router.get("/{site_id}", response_model=Site)
def read_site(
    site_id: UUID,
    db: Session = Depends(deps.get_db),
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
) -> Any:
    return _to_schema(_get_or_404(db, site_id), blobs)


@router.patch("/{site_id}", response_model=Site)
def update_site(
    *,
    site_id: UUID,
    site_in: SiteUpdate,
    db: Session = Depends(deps.get_db),
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
    cache: SiteConfigCache = Depends(deps.get_site_cache),
) -> Any:
    site = _get_or_404(db, site_id)
    site = site_service.update_site(db, site, site_in, blobs, cache)
    return _to_schema(site, blobs)


@router.delete("/{site_id}", status_code=204)
async def delete_site(
    site_id: UUID,
    db: Session = Depends(deps.get_db),
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
    cache: SiteConfigCache = Depends(deps.get_site_cache),
    orchestrator: CustomDomainOrchestrator = Depends(deps.get_orchestrator),
) -> None:
    site = await run_in_threadpool(crud_site.get, db, site_id)
    if site is None:
        return None
    await site_service.delete_site(db, site, orchestrator, blobs, cache)
    return None
