import asyncio
import logging
from typing import Dict

from sqlalchemy.orm import Session

from sitefront.celery_app import celery_app
from sitefront.config import provider_settings_from, settings
from sitefront.crud import crud_custom_domain
from sitefront.db.session import SessionLocal
from sitefront.exceptions import ProviderConfigError, ProviderError
from sitefront.services.cache import SiteConfigCache
from sitefront.services.custom_domains import CustomDomainOrchestrator
from sitefront.services.domain_provider import DomainProviderGateway

logger = logging.getLogger(__name__)


async def reconcile_all(orchestrator: CustomDomainOrchestrator, db: Session) -> Dict[str, int]:
    """
    Refresh every custom domain record from the provider.

    A failing record is already marked `error` by refresh_status; the sweep
    moves on. Missing credentials stop the sweep (every call would fail).
    """
    summary = {"checked": 0, "active": 0, "pending": 0, "error": 0}
    ids = [record.id for record in crud_custom_domain.get_all(db)]

    for domain_id in ids:
        summary["checked"] += 1
        try:
            record = await orchestrator.refresh_status(domain_id)
        except ProviderConfigError:
            raise
        except ProviderError as e:
            summary["error"] += 1
            logger.info("Reconcile: %s failed: %s", domain_id, e.message)
            continue
        summary[record.status] = summary.get(record.status, 0) + 1

    return summary


@celery_app.task(bind=True)
def reconcile_custom_domains(self):
    """
    Background task: re-sync custom domain status with the provider.
    Scheduled by celery beat every DOMAIN_RECONCILE_INTERVAL_SECONDS.
    """
    db = SessionLocal()
    try:
        orchestrator = CustomDomainOrchestrator(
            db,
            DomainProviderGateway(provider_settings_from(settings)),
            cache=SiteConfigCache.from_url(settings.SITE_CACHE_REDIS_URL, ttl=settings.SITE_CONFIG_CACHE_TTL),
            retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS,
        )
        summary = asyncio.run(reconcile_all(orchestrator, db))
        logger.info("Custom domain reconcile finished: %s", summary)
        return summary
    except ProviderConfigError as e:
        logger.error("Custom domain reconcile skipped: %s", e.message)
        return {"status": "skipped", "error": e.message}
    finally:
        db.close()
