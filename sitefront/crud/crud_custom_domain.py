from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sitefront.exceptions import ConflictError
from sitefront.models.custom_domain import CustomDomain


def get(db: Session, domain_id: UUID) -> Optional[CustomDomain]:
    return db.query(CustomDomain).filter(CustomDomain.id == domain_id).first()


def get_by_domain(db: Session, domain: str) -> Optional[CustomDomain]:
    return db.query(CustomDomain).filter(CustomDomain.domain == domain).first()


def get_multi_by_site(db: Session, site_id: UUID) -> List[CustomDomain]:
    return (
        db.query(CustomDomain)
        .filter(CustomDomain.site_id == site_id)
        .order_by(CustomDomain.created_at.desc())
        .all()
    )


def get_all(db: Session) -> List[CustomDomain]:
    return db.query(CustomDomain).order_by(CustomDomain.created_at).all()


def create(
    db: Session,
    *,
    site_id: UUID,
    domain: str,
    redirect_from_www: bool,
    status: str,
    verification_type: Optional[str] = None,
    verification_name: Optional[str] = None,
    verification_value: Optional[str] = None,
    provider_domain_id: Optional[str] = None,
    error: Optional[str] = None,
) -> CustomDomain:
    if get_by_domain(db, domain):
        raise ConflictError(f'Domain "{domain}" is already connected.')

    db_obj = CustomDomain(
        site_id=site_id,
        domain=domain,
        redirect_from_www=redirect_from_www,
        status=status,
        verification_type=verification_type,
        verification_name=verification_name,
        verification_value=verification_value,
        provider_domain_id=provider_domain_id,
        error=error,
    )
    db.add(db_obj)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f'Domain "{domain}" is already connected.')
    db.refresh(db_obj)
    return db_obj


def update_status(
    db: Session,
    *,
    db_obj: CustomDomain,
    status: str,
    verification_type: Optional[str] = None,
    verification_name: Optional[str] = None,
    verification_value: Optional[str] = None,
    error: Optional[str] = None,
) -> CustomDomain:
    db_obj.status = status
    db_obj.verification_type = verification_type
    db_obj.verification_name = verification_name
    db_obj.verification_value = verification_value
    db_obj.error = error
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj


def remove(db: Session, *, db_obj: CustomDomain) -> None:
    db.delete(db_obj)
    db.commit()
