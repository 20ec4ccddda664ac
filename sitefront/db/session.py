"""
Database engine and sessions for the site registry.

PostgreSQL in deployments (pooled); any other SQLAlchemy URL set through
DATABASE_URL (e.g. sqlite for local runs) gets the driver's default pool.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from sitefront.config import settings

logger = logging.getLogger("sitefront.db")


def _engine_options(url: str) -> dict:
    if not url.startswith("postgresql"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }


engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, **_engine_options(settings.SQLALCHEMY_DATABASE_URI))

logger.debug("Database engine: %s", engine.url.render_as_string(hide_password=True))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_pool_status() -> dict:
    """Connection pool snapshot (for /health)."""
    pool = engine.pool
    status = {"pool": pool.__class__.__name__}
    for name in ("size", "checkedin", "checkedout", "overflow"):
        probe = getattr(pool, name, None)
        if callable(probe):
            status[name] = probe()
    return status
