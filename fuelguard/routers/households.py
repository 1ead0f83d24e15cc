# fuelguard/routers/households.py
"""Household registration for gas bottles — same lifecycle as vehicles."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.models.household import Household
from fuelguard.models.types import QREntityType
from fuelguard.schemas.household import HouseholdCreate, HouseholdOut
from fuelguard.schemas.verification import gas_eligibility_out
from fuelguard.services import household_service
from fuelguard.services.audit_service import log_audit
from fuelguard.services.qr_service import QRCodeService, get_qr_service, render_data_url
from fuelguard.services.quota_service import check_gas_eligibility
from fuelguard.services.station_service import station_wilaya

router = APIRouter()


@router.post("/households", response_model=HouseholdOut, summary="Register a household")
async def register_household(body: HouseholdCreate, db: Session = Depends(get_db)):
    household = household_service.register_household(
        db, body.owner_id, body.national_id, body.full_name, body.wilaya, body.member_count,
        commune=body.commune, address=body.address,
    )
    await log_audit(db, "REGISTER_HOUSEHOLD", "Household", household.id, user_id=body.owner_id,
                    details={"wilaya": household.wilaya, "member_count": household.member_count})
    return household


@router.get("/households", response_model=list[HouseholdOut], summary="List households")
def list_households(owner_id: Optional[str] = None, wilaya: Optional[str] = None,
                    is_verified: Optional[bool] = None, db: Session = Depends(get_db)):
    q = db.query(Household)
    if owner_id:
        q = q.filter(Household.owner_id == owner_id)
    if wilaya:
        q = q.filter(Household.wilaya == wilaya)
    if is_verified is not None:
        q = q.filter(Household.is_verified.is_(is_verified))
    return q.order_by(Household.created_at.desc()).all()


@router.get("/households/{household_id}", response_model=HouseholdOut, summary="Get a household")
def get_household(household_id: str, db: Session = Depends(get_db)):
    return household_service.get_household(db, household_id)


@router.put("/households/{household_id}/verify", response_model=HouseholdOut,
            summary="Admin — verify a household")
async def verify_household(household_id: str, db: Session = Depends(get_db)):
    household = household_service.set_household_verified(db, household_id, True)
    await log_audit(db, "VERIFY_HOUSEHOLD", "Household", household_id)
    return household


@router.delete("/households/{household_id}", summary="Deactivate a household")
async def deactivate_household(household_id: str, db: Session = Depends(get_db)):
    household = household_service.deactivate_household(db, household_id)
    await log_audit(db, "DEACTIVATE_HOUSEHOLD", "Household", household_id)
    return {"status": "deactivated", "id": household.id}


@router.get("/households/{household_id}/qrcode", summary="Today's QR code for a household")
def household_qrcode(household_id: str, db: Session = Depends(get_db),
                     qr_service: QRCodeService = Depends(get_qr_service)):
    household = household_service.get_household(db, household_id)
    content = household_service.issue_household_qr(db, household, qr_service)
    record = qr_service.get_active_record(db, QREntityType.HOUSEHOLD, household.id)
    return {
        "qr_content": content,
        "qr_image": render_data_url(content),
        "expires_at": record.expires_at.isoformat() if record else None,
    }


@router.get("/households/{household_id}/eligibility", summary="Gas bottle eligibility for a household")
def household_eligibility(household_id: str, station_id: Optional[str] = None, db: Session = Depends(get_db)):
    result = check_gas_eligibility(db, household_id, station_wilaya(db, station_id))
    return gas_eligibility_out(result)
