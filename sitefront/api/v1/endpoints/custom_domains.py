"""
Custom Domain Management API

Lets the admin dashboard:
  1. List a site's custom domains
  2. Connect a domain (optionally with a www. redirect) to the hosting provider
  3. Refresh DNS status from the provider
  4. Remove a domain (provider detach is best-effort)
"""
import logging
from typing import Any, List
from uuid import UUID

from fastapi import APIRouter, Depends

from sitefront.schemas.custom_domain import (
    AttachResult,
    CustomDomain,
    CustomDomainCreate,
    RefreshResult,
    RemoveResult,
)
from sitefront.api import deps
from sitefront.services.custom_domains import CustomDomainOrchestrator

router = APIRouter()
site_domains_router = APIRouter()
logger = logging.getLogger("sitefront.custom_domain")


@site_domains_router.get("/{site_id}/domains", response_model=List[CustomDomain])
def list_domains(
    site_id: UUID,
    orchestrator: CustomDomainOrchestrator = Depends(deps.get_orchestrator),
) -> Any:
    return orchestrator.list_for_site(site_id)


@site_domains_router.post("/{site_id}/domains", response_model=AttachResult, status_code=201)
async def add_domain(
    site_id: UUID,
    body: CustomDomainCreate,
    orchestrator: CustomDomainOrchestrator = Depends(deps.get_orchestrator),
) -> Any:
    result = await orchestrator.create_for_site(site_id, body.domain, body.redirect_from_www)
    return AttachResult(apex_id=result.apex_id, www_id=result.www_id)


@router.post("/{domain_id}/refresh", response_model=RefreshResult)
async def refresh_domain(
    domain_id: UUID,
    orchestrator: CustomDomainOrchestrator = Depends(deps.get_orchestrator),
) -> Any:
    record = await orchestrator.refresh_status(domain_id)
    return RefreshResult(id=record.id, status=record.status)


@router.delete("/{domain_id}", response_model=RemoveResult)
async def delete_domain(
    domain_id: UUID,
    orchestrator: CustomDomainOrchestrator = Depends(deps.get_orchestrator),
) -> Any:
    result = await orchestrator.remove_from_project(domain_id)
    if result is None:
        # already gone
        return RemoveResult(removed=False)
    return RemoveResult(removed=True, detached=result.detached, reason=result.reason)
