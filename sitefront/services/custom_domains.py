"""
Custom domain lifecycle

Coordinates the provider gateway, the DNS deriver and the registry:

  create_for_site      attach apex (+ optional www. redirect) and record both
  refresh_status       re-read provider DNS config and patch the record
  remove_from_project  best-effort provider detach, then always delete locally
  list_for_site        records of one site, newest first

Status per record: pending → active, pending/active → error, error → pending/active
(on refresh). No state is held here; after a crash the registry reflects
whichever steps completed.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from sitefront.crud import crud_custom_domain, crud_site
from sitefront.exceptions import ConflictError, NotFoundError, ProviderApiError, ProviderError
from sitefront.models.custom_domain import STATUS_ERROR, STATUS_PENDING, CustomDomain
from sitefront.services.cache import SiteConfigCache, domain_tag
from sitefront.services.dns_instructions import DnsInstruction, derive_dns_instruction
from sitefront.services.domain_provider import DomainProviderGateway
from sitefront.services.hostnames import normalize_domain

logger = logging.getLogger("sitefront.custom_domain")

DNS_UNKNOWN = (
    'Vercel has not reported DNS records for "{domain}" yet. '
    "Refresh the status again in a few minutes."
)


@dataclass(frozen=True)
class AttachResult:
    apex_id: UUID
    www_id: Optional[UUID] = None


@dataclass(frozen=True)
class DetachResult:
    detached: bool
    reason: Optional[str] = None


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ProviderApiError) and exc.is_transient


def _status_fields(domain: str, dns: DnsInstruction) -> dict:
    """Registry fields for a derived instruction; no record while pending is an error state."""
    if dns.status == STATUS_PENDING and not dns.has_record:
        return {"status": STATUS_ERROR, "error": DNS_UNKNOWN.format(domain=domain)}
    return {
        "status": dns.status,
        "verification_type": dns.verification_type,
        "verification_name": dns.verification_name,
        "verification_value": dns.verification_value,
        "error": None,
    }


class CustomDomainOrchestrator:
    # backoff between attempts when retry_attempts > 1
    retry_wait = wait_exponential(multiplier=1, min=1, max=10)

    def __init__(
        self,
        db: Session,
        gateway: DomainProviderGateway,
        cache: Optional[SiteConfigCache] = None,
        retry_attempts: int = 1,
    ):
        self.db = db
        self.gateway = gateway
        self.cache = cache
        self.retry_attempts = max(1, retry_attempts)

    # ── helpers ──

    async def _provider(self, fn, *args):
        """Run one gateway call under the configured retry policy (1 attempt = none)."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        ):
            with attempt:
                return await fn(*args)

    async def _blocking(self, fn, *args, **kwargs):
        """Registry and cache calls are blocking; keep them off the event loop."""
        return await run_in_threadpool(fn, *args, **kwargs)

    async def _invalidate(self, *domains: str) -> None:
        if self.cache is not None:
            await self._blocking(self.cache.invalidate_tags, *(domain_tag(d) for d in domains))

    async def _attach_and_inspect(self, domain: str, redirect_target: Optional[str] = None):
        provider_id = await self._provider(self.gateway.attach, domain, redirect_target)
        try:
            config = await self._provider(self.gateway.fetch_config, domain)
        except ProviderError as e:
            return provider_id, {"status": STATUS_ERROR, "error": e.message}
        return provider_id, _status_fields(domain, derive_dns_instruction(domain, config))

    # ── workflows ──

    def list_for_site(self, site_id: UUID) -> List[CustomDomain]:
        return crud_custom_domain.get_multi_by_site(self.db, site_id)

    async def create_for_site(
        self, site_id: UUID, raw_domain: str, redirect_from_www: bool
    ) -> AttachResult:
        apex = normalize_domain(raw_domain)
        www = f"www.{apex}"

        if await self._blocking(crud_site.get, self.db, site_id) is None:
            raise NotFoundError("Site not found.")

        # reject duplicates before touching the provider
        for candidate in ((apex, www) if redirect_from_www else (apex,)):
            if await self._blocking(crud_custom_domain.get_by_domain, self.db, candidate):
                raise ConflictError(f'Domain "{candidate}" is already connected.')

        # 1) apex: an attach failure aborts with nothing recorded
        provider_id, fields = await self._attach_and_inspect(apex)
        apex_row = await self._blocking(
            crud_custom_domain.create,
            self.db,
            site_id=site_id,
            domain=apex,
            redirect_from_www=redirect_from_www,
            provider_domain_id=provider_id,
            **fields,
        )
        logger.info("Custom domain %s attached for site %s (%s)", apex, site_id, apex_row.status)

        www_id: Optional[UUID] = None

        # 2) www.<apex> redirecting to the apex; failures never roll back the apex
        if redirect_from_www:
            try:
                www_provider_id, www_fields = await self._attach_and_inspect(www, apex)
            except ProviderError as e:
                logger.warning("Attaching %s failed: %s", www, e.message)
                www_provider_id, www_fields = None, {"status": STATUS_ERROR, "error": e.message}

            www_row = await self._blocking(
                crud_custom_domain.create,
                self.db,
                site_id=site_id,
                domain=www,
                redirect_from_www=True,
                provider_domain_id=www_provider_id,
                **www_fields,
            )
            www_id = www_row.id

        await self._invalidate(apex, www)
        return AttachResult(apex_id=apex_row.id, www_id=www_id)

    async def refresh_status(self, domain_id: UUID) -> CustomDomain:
        record = await self._blocking(crud_custom_domain.get, self.db, domain_id)
        if record is None:
            raise NotFoundError("Custom domain not found.")

        try:
            config = await self._provider(self.gateway.fetch_config, record.domain)
        except ProviderError as e:
            # persist the failure, then surface it
            await self._blocking(
                crud_custom_domain.update_status,
                self.db,
                db_obj=record,
                status=STATUS_ERROR,
                verification_type=record.verification_type,
                verification_name=record.verification_name,
                verification_value=record.verification_value,
                error=e.message,
            )
            logger.warning("Refreshing %s failed: %s", record.domain, e.message)
            raise

        fields = _status_fields(record.domain, derive_dns_instruction(record.domain, config))
        fields.setdefault("verification_type", record.verification_type)
        fields.setdefault("verification_name", record.verification_name)
        fields.setdefault("verification_value", record.verification_value)
        record = await self._blocking(crud_custom_domain.update_status, self.db, db_obj=record, **fields)
        await self._invalidate(record.domain)
        return record

    async def detach_best_effort(self, domain: str) -> DetachResult:
        try:
            await self.gateway.detach(domain)
        except ProviderError as e:
            logger.warning("Provider detach of %s failed (ignored): %s", domain, e.message)
            return DetachResult(detached=False, reason=e.message)
        except Exception as e:
            # the local record is removed whatever the provider does
            logger.exception("Unexpected error detaching %s (ignored)", domain)
            return DetachResult(detached=False, reason=str(e) or e.__class__.__name__)
        return DetachResult(detached=True)

    async def remove_from_project(self, domain_id: UUID) -> Optional[DetachResult]:
        record = await self._blocking(crud_custom_domain.get, self.db, domain_id)
        if record is None:
            return None

        domain = record.domain
        result = await self.detach_best_effort(domain)

        await self._blocking(crud_custom_domain.remove, self.db, db_obj=record)
        await self._invalidate(domain)
        logger.info("Custom domain %s removed (provider detached=%s)", domain, result.detached)
        return result
