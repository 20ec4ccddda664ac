"""Create all database tables"""
import logging
from sitefront.db.base_class import Base
from sitefront.db.session import engine
# Import all models so they are registered with Base.metadata
import sitefront.models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_tables():
    logger.info("Creating site and customdomain tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    create_tables()
