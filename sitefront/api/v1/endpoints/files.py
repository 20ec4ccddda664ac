"""
Favicon asset upload & download

  POST /api/v1/uploads/{ticket}   raw body, one-time ticket from /sites/upload-url
  GET  /files/{storage_id}        serve a stored asset
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool

from sitefront.api import deps
from sitefront.config import settings
from sitefront.exceptions import NotFoundError, PayloadTooLargeError, ValidationError
from sitefront.schemas.site import StoredAsset
from sitefront.services.blob_store import LocalBlobStore

router = APIRouter()
files_router = APIRouter()
logger = logging.getLogger("sitefront.blobs")


@router.post("/{ticket}", response_model=StoredAsset)
async def upload_asset(
    ticket: str,
    request: Request,
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
) -> Any:
    body = await request.body()
    if not body:
        raise ValidationError("Empty upload")
    if len(body) > settings.MAX_FILE_SIZE:
        raise PayloadTooLargeError(f"File exceeds {settings.MAX_FILE_SIZE} bytes")
    if not blobs.consume_upload_ticket(ticket):
        raise NotFoundError("Upload URL expired or already used")

    return StoredAsset(storage_id=await run_in_threadpool(blobs.put, body))


@files_router.get("/files/{storage_id}")
def download_asset(
    storage_id: str,
    blobs: LocalBlobStore = Depends(deps.get_blob_store),
) -> FileResponse:
    path = blobs.path_for(storage_id)
    if path is None:
        raise NotFoundError("File not found")
    return FileResponse(path)
