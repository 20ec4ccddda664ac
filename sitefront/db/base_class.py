from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase, declared_attr


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    # Table name = lowercase class name (Site -> "site", CustomDomain -> "customdomain")
    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
