"""
Typed views of the domain provider's responses.

Only the fields we consume are modelled; anything else the provider sends is
ignored. A response missing a required field fails validation at the gateway.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ProviderModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RecommendedIPv4(_ProviderModel):
    rank: int = 0
    value: List[str] = Field(default_factory=list)


class RecommendedCNAME(_ProviderModel):
    rank: int = 0
    value: str


class ProviderDomainConfig(_ProviderModel):
    configured_by: Optional[str] = Field(default=None, alias="configuredBy")
    accepted_challenges: List[str] = Field(default_factory=list, alias="acceptedChallenges")
    recommended_ipv4: List[RecommendedIPv4] = Field(default_factory=list, alias="recommendedIPv4")
    recommended_cname: List[RecommendedCNAME] = Field(default_factory=list, alias="recommendedCNAME")
    misconfigured: bool


class ProviderDomain(_ProviderModel):
    name: str
    id: Optional[str] = None
    apex_name: Optional[str] = Field(default=None, alias="apexName")
    verified: Optional[bool] = None
    redirect: Optional[str] = None
