import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sitefront.exceptions import ConflictError, ValidationError
from sitefront.models.site import Site
from sitefront.schemas.site import SiteCreate, SiteUpdate
from sitefront.services.hostnames import validate_subdomain

logger = logging.getLogger("sitefront.registry")

SUBDOMAIN_TAKEN = "Subdomain is already in use."
REQUIRED_FIELDS = ("name", "title", "primary_color", "secondary_color")


def get(db: Session, site_id: UUID) -> Optional[Site]:
    return db.query(Site).filter(Site.id == site_id).first()


def get_by_subdomain(db: Session, subdomain: str) -> Optional[Site]:
    return db.query(Site).filter(Site.subdomain == subdomain).first()


def get_multi(db: Session, skip: int = 0, limit: int = 100) -> List[Site]:
    return db.query(Site).order_by(Site.created_at.desc()).offset(skip).limit(limit).all()


def _commit_unique(db: Session, db_obj: Site) -> Site:
    """Commit, turning a unique-index violation into ConflictError."""
    try:
        db.commit()
    except IntegrityError:
        # Lost a race against a concurrent writer that passed the same pre-check
        db.rollback()
        raise ConflictError(SUBDOMAIN_TAKEN)
    db.refresh(db_obj)
    return db_obj


def create(db: Session, *, obj_in: SiteCreate) -> Site:
    subdomain = validate_subdomain(obj_in.subdomain)
    if get_by_subdomain(db, subdomain):
        raise ConflictError(SUBDOMAIN_TAKEN)

    db_obj = Site(
        name=obj_in.name,
        subdomain=subdomain,
        title=obj_in.title,
        description=obj_in.description or "",
        primary_color=obj_in.primary_color,
        secondary_color=obj_in.secondary_color,
        favicon_asset_id=obj_in.favicon_asset_id,
    )
    db.add(db_obj)
    site = _commit_unique(db, db_obj)
    logger.info("Site created: %s (%s)", site.subdomain, site.id)
    return site


def update(db: Session, *, db_obj: Site, obj_in: SiteUpdate) -> Site:
    update_data = obj_in.model_dump(exclude_unset=True)

    if "subdomain" in update_data:
        subdomain = validate_subdomain(update_data["subdomain"])
        existing = get_by_subdomain(db, subdomain)
        if existing and existing.id != db_obj.id:
            raise ConflictError(SUBDOMAIN_TAKEN)
        update_data["subdomain"] = subdomain

    for field in REQUIRED_FIELDS:
        if field in update_data and update_data[field] is None:
            raise ValidationError(f"{field} is required.")

    for field, value in update_data.items():
        if field == "description" and value is None:
            value = ""
        setattr(db_obj, field, value)
    db.add(db_obj)
    return _commit_unique(db, db_obj)


def remove(db: Session, *, db_obj: Site) -> None:
    db.delete(db_obj)
    db.commit()
