"""
Site Model

One tenant site: keyed by a globally unique subdomain, carrying its public
branding (title, colors, favicon blob reference).
"""
import uuid
from sqlalchemy import Column, String, Text, DateTime, Uuid
from sqlalchemy.orm import relationship
from sitefront.db.base_class import Base, utcnow


class Site(Base):
    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    name = Column(String(200), nullable=False)
    subdomain = Column(String(63), unique=True, nullable=False, index=True)

    # ── Public branding ──
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    primary_color = Column(String(32), nullable=False)
    secondary_color = Column(String(32), nullable=False)
    favicon_asset_id = Column(String(64), nullable=True)     # blob store id

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    custom_domains = relationship(
        "CustomDomain", back_populates="site", cascade="all, delete-orphan"
    )
