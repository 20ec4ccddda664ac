"""
Local blob store for favicon assets.

put(bytes) -> id, url_for(id) -> url | None, delete(id), plus one-time upload
tickets: a ticket is a marker file under <root>/.tickets that is removed on
first use, so a ticket can be consumed exactly once.
"""
import logging
import os
import re
import secrets
import uuid
from pathlib import Path
from typing import Optional

logger = logging.getLogger("sitefront.blobs")

_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")
_TICKET_PATTERN = re.compile(r"^[A-Za-z0-9_-]{20,100}$")


class LocalBlobStore:
    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self._tickets = self.root / ".tickets"

    def _path(self, blob_id: str) -> Optional[Path]:
        if not blob_id or not _ID_PATTERN.match(blob_id):
            return None
        return self.root / blob_id

    # ── blobs ──

    def put(self, data: bytes) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        blob_id = uuid.uuid4().hex
        (self.root / blob_id).write_bytes(data)
        logger.info("Stored blob %s (%d bytes)", blob_id, len(data))
        return blob_id

    def exists(self, blob_id: Optional[str]) -> bool:
        path = self._path(blob_id or "")
        return path is not None and path.is_file()

    def url_for(self, blob_id: Optional[str]) -> Optional[str]:
        """Public URL of a stored blob, or None when absent / deleted."""
        if not self.exists(blob_id):
            return None
        return f"{self.public_base_url}/files/{blob_id}"

    def path_for(self, blob_id: str) -> Optional[Path]:
        return self._path(blob_id) if self.exists(blob_id) else None

    def delete(self, blob_id: Optional[str]) -> bool:
        path = self._path(blob_id or "")
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted blob %s", blob_id)
        return True

    # ── one-time upload tickets ──

    def issue_upload_ticket(self) -> str:
        self._tickets.mkdir(parents=True, exist_ok=True)
        ticket = secrets.token_urlsafe(32)
        (self._tickets / ticket).touch()
        return ticket

    def consume_upload_ticket(self, ticket: str) -> bool:
        if not ticket or not _TICKET_PATTERN.match(ticket):
            return False
        try:
            os.remove(self._tickets / ticket)
        except FileNotFoundError:
            return False
        return True
