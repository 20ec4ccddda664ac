"""
Worker / beat entry point:

    celery -A celery_worker worker -Q domains --loglevel=info
    celery -A celery_worker beat --loglevel=info
"""
from sitefront.celery_app import celery_app as app
from sitefront.logging_config import setup_logging

setup_logging()

__all__ = ["app"]
