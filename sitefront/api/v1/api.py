from fastapi import APIRouter, Depends

from sitefront.api import deps
from sitefront.api.v1.endpoints import custom_domains, files, sites

api_router = APIRouter()

# ─── Admin (service token) ───
admin = [Depends(deps.verify_service_token)]
api_router.include_router(sites.router, prefix="/sites", tags=["sites"], dependencies=admin)
api_router.include_router(
    custom_domains.site_domains_router, prefix="/sites", tags=["custom-domains"], dependencies=admin
)
api_router.include_router(
    custom_domains.router, prefix="/domains", tags=["custom-domains"], dependencies=admin
)

# ─── Uploads (authorized by the one-time ticket in the URL) ───
api_router.include_router(files.router, prefix="/uploads", tags=["uploads"])
