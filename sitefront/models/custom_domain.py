"""
Custom Domain Model

Tracks per-site customer-owned domains attached to the hosting provider,
with the DNS record the owner must create and the last known status.
Apex and www. variants are separate rows.
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
from sitefront.db.base_class import Base, utcnow

STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"
STATUS_ERROR = "error"
DOMAIN_STATUSES = (STATUS_PENDING, STATUS_ACTIVE, STATUS_ERROR)


class CustomDomain(Base):
    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    site_id = Column(Uuid, ForeignKey("site.id", ondelete="CASCADE"), nullable=False, index=True)
    domain = Column(String(255), unique=True, nullable=False, index=True)
    redirect_from_www = Column(Boolean, nullable=False, default=False)

    status = Column(String(16), nullable=False, default=STATUS_PENDING)  # pending, active, error

    # DNS record the domain owner must create
    verification_type = Column(String(16), nullable=True)    # A / CNAME
    verification_name = Column(String(255), nullable=True)
    verification_value = Column(String(255), nullable=True)

    provider_domain_id = Column(String(255), nullable=True)
    error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    site = relationship("Site", back_populates="custom_domains")
