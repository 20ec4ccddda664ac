from typing import Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Shared properties
class SiteBase(CamelModel):
    name: Optional[str] = None
    subdomain: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    favicon_asset_id: Optional[str] = None


# Properties to receive via API on creation
class SiteCreate(SiteBase):
    name: str = Field(min_length=1)
    subdomain: str
    title: str = Field(min_length=1)
    description: str = ""
    primary_color: str = Field(min_length=1)
    secondary_color: str = Field(min_length=1)


# Properties to receive via API on update (any subset)
class SiteUpdate(SiteBase):
    name: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    primary_color: Optional[str] = Field(default=None, min_length=1)
    secondary_color: Optional[str] = Field(default=None, min_length=1)


class Site(SiteBase):
    id: UUID
    favicon_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Public tenant configuration (no ids, no timestamps)
class SiteConfig(CamelModel):
    name: str
    subdomain: str
    title: str
    description: str = ""
    primary_color: str
    secondary_color: str
    favicon_url: Optional[str] = None


class UploadUrl(CamelModel):
    upload_url: str


class StoredAsset(CamelModel):
    storage_id: str
