"""
Structured logging

JSON lines in production/staging (shipped to Loki), a compact human format in
development. Every record carries the request id and the resolved tenant
(`subdomain:acme`, `custom_domain:shop.example.com`) from context variables.
Provider credentials are scrubbed from messages before they are written.
"""

import json
import logging
import re
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional

from sitefront.config import settings

# ── Context variables for request tracking ──
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
tenant_id_ctx: ContextVar[str] = ContextVar("tenant_id", default="-")

# LogRecord attributes passed through `extra=` that the JSON formatter keeps
EXTRA_FIELDS = ("domain", "site_id", "operation", "status")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


# ═══════════════════════════════════════════
#  Secret Masking
# ═══════════════════════════════════════════

_REDACT_PATTERNS = [
    (re.compile(r'(Bearer\s+)[A-Za-z0-9._~+/=-]+', re.I), r'\1***'),
    (re.compile(r'("?(?:token|secret|api_key|authorization)"?\s*[:=]\s*)"[^"]*"', re.I), r'\1"***"'),
    (re.compile(r'(X-Service-Token:\s*)\S+', re.I), r'\1***'),
]


def mask_secrets(text: str, known_secrets: Optional[tuple] = None) -> str:
    """Mask credentials that slipped into log messages."""
    for pattern, replacement in _REDACT_PATTERNS:
        text = pattern.sub(replacement, text)
    for secret in known_secrets if known_secrets is not None else _configured_secrets():
        if secret and secret in text:
            text = text.replace(secret, "***")
    return text


def _configured_secrets() -> tuple:
    return (settings.VERCEL_ACCESS_TOKEN, settings.ADMIN_SERVICE_TOKEN)


# ═══════════════════════════════════════════
#  Formatters
# ═══════════════════════════════════════════

class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S.000Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": mask_secrets(record.getMessage()),
            "request_id": request_id_ctx.get("-"),
            "tenant": tenant_id_ctx.get("-"),
        }
        for field in EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = mask_secrets(self.formatException(record.exc_info))

        # drop empty context
        log_entry = {k: v for k, v in log_entry.items() if v not in (None, "", "-")}

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class HumanFormatter(logging.Formatter):
    FORMAT = "%(asctime)s %(levelname)-7s %(name)-26s [%(request_id)s %(tenant)s] %(message)s"

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_ctx.get("-")
        record.tenant = tenant_id_ctx.get("-")
        return mask_secrets(super().format(record))


# ═══════════════════════════════════════════
#  Setup
# ═══════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """Install the single stdout handler on the root logger."""
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if settings.is_production or settings.is_staging:
        handler.setFormatter(JSONFormatter())
        default_level = "INFO"
    else:
        handler.setFormatter(HumanFormatter(HumanFormatter.FORMAT, datefmt="%H:%M:%S"))
        default_level = "DEBUG"

    root.setLevel((level or settings.LOG_LEVEL or default_level).upper())
    root.addHandler(handler)

    # httpx logs full request URLs (team ids, project ids) at INFO
    for name in ("uvicorn.access", "httpcore", "httpx", "asyncio", "celery.redirected"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
