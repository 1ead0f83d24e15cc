# fuelguard/services/household_service.py
"""Household lookup and lifecycle helpers (gas-bottle quota subjects)."""

from typing import Optional

from sqlalchemy.orm import Session

from fuelguard.errors import DomainError, NotFoundError
from fuelguard.models.household import Household
from fuelguard.models.types import QREntityType
from fuelguard.models.user import User
from fuelguard.services.qr_service import QRCodeService
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


def get_household(db: Session, household_id: str) -> Household:
    household = db.query(Household).filter(Household.id == household_id).first()
    if not household:
        raise NotFoundError("Household not found", code="household_not_found")
    return household


def register_household(db: Session, owner_id: str, national_id: str, full_name: str, wilaya: str,
                       member_count: int, commune: Optional[str] = None,
                       address: Optional[str] = None) -> Household:
    if not db.query(User).filter(User.id == owner_id).first():
        raise NotFoundError("Owner not found", code="owner_not_found")
    if db.query(Household).filter(Household.national_id == national_id).first():
        raise DomainError(code="national_id_taken", http_status=400,
                          message="This national ID is already registered for gas bottle quota")

    household = Household(owner_id=owner_id, national_id=national_id, full_name=full_name, wilaya=wilaya,
                          commune=commune, address=address, member_count=member_count,
                          is_verified=False, is_active=True)
    db.add(household)
    db.commit()
    db.refresh(household)
    logger.info(f"[HOUSEHOLD] Registered {household.id} wilaya={wilaya} members={member_count}")
    return household


def set_household_verified(db: Session, household_id: str, verified: bool = True) -> Household:
    household = get_household(db, household_id)
    household.is_verified = verified
    db.commit()
    logger.info(f"[HOUSEHOLD] {household_id} verified={verified}")
    return household


def deactivate_household(db: Session, household_id: str) -> Household:
    household = get_household(db, household_id)
    household.is_active = False
    db.commit()
    logger.info(f"[HOUSEHOLD] {household_id} deactivated")
    return household


def issue_household_qr(db: Session, household: Household, qr_service: QRCodeService) -> str:
    if not household.is_active:
        raise DomainError(code="household_inactive", http_status=400,
                          message="Household registration is deactivated")
    if not household.is_verified:
        raise DomainError(code="household_unverified", http_status=400,
                          message="Household is not yet verified. Please wait for admin approval.")

    content = qr_service.get_or_generate(db, QREntityType.HOUSEHOLD, household.id, household.national_id)
    if household.qr_code_data != content:
        household.qr_code_data = content
        db.commit()
    return content
