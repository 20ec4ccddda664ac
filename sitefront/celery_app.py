from celery import Celery
from sitefront.config import settings

celery_app = Celery(
    "sitefront",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["sitefront.tasks.domain_tasks"],
)

celery_app.conf.update(
    broker_connection_retry_on_startup=True,
    task_routes={"sitefront.tasks.*": {"queue": "domains"}},
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # a sweep that outlives its interval is cut off before the next one starts
    task_time_limit=settings.DOMAIN_RECONCILE_INTERVAL_SECONDS,
    result_expires=24 * 3600,
)

celery_app.conf.beat_schedule = {
    "reconcile-custom-domains": {
        "task": "sitefront.tasks.domain_tasks.reconcile_custom_domains",
        "schedule": float(settings.DOMAIN_RECONCILE_INTERVAL_SECONDS),
        "options": {"expires": settings.DOMAIN_RECONCILE_INTERVAL_SECONDS},
    },
}
