from typing import Optional
from uuid import UUID
from datetime import datetime

from sitefront.schemas.site import CamelModel


class CustomDomainCreate(CamelModel):
    domain: str
    redirect_from_www: bool = False


class CustomDomain(CamelModel):
    id: UUID
    site_id: UUID
    domain: str
    redirect_from_www: bool
    status: str
    verification_type: Optional[str] = None
    verification_name: Optional[str] = None
    verification_value: Optional[str] = None
    provider_domain_id: Optional[str] = None
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AttachResult(CamelModel):
    apex_id: UUID
    www_id: Optional[UUID] = None


class RefreshResult(CamelModel):
    id: UUID
    status: str


class RemoveResult(CamelModel):
    removed: bool
    detached: bool = False
    reason: Optional[str] = None
