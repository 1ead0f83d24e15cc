# fuelguard/routers/verification.py
"""
Fuel station operator endpoints: scan a QR (or type a plate), then approve or deny.
A QR that fails validation answers 400 with the validator's error and expiry flag.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.schemas.transaction import FuelTransactionOut
from fuelguard.schemas.verification import (
    ScanRequest, LookupRequest, FuelApproveRequest, FuelDenyRequest,
    fuel_eligibility_out, gas_eligibility_out,
)
from fuelguard.services import station_service
from fuelguard.services.audit_service import log_audit
from fuelguard.services.qr_validator import QRValidator, get_qr_validator

router = APIRouter()


def invalid_qr_response(validation) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": validation.error, "expired": validation.expired})


@router.post("/verify/scan", summary="Scan a QR code")
def scan(body: ScanRequest, db: Session = Depends(get_db), validator: QRValidator = Depends(get_qr_validator)):
    outcome = station_service.scan_qr(db, body.qr_content, validator, body.station_id)
    if not outcome.validation.valid:
        return invalid_qr_response(outcome.validation)
    if outcome.fuel is not None:
        return {"type": "vehicle", **fuel_eligibility_out(outcome.fuel)}
    return {"type": "household", **gas_eligibility_out(outcome.gas)}


@router.post("/verify/lookup", summary="Manual plate lookup")
def lookup(body: LookupRequest, db: Session = Depends(get_db)):
    result = station_service.manual_lookup(db, body.plate_number, body.station_id)
    return {"type": "vehicle", **fuel_eligibility_out(result)}


@router.post("/verify/approve", response_model=FuelTransactionOut, summary="Approve a fill")
async def approve(body: FuelApproveRequest, db: Session = Depends(get_db)):
    transaction = station_service.approve_fuel(db, body.vehicle_id, body.station_id, body.processed_by_id,
                                               body.liters)
    await log_audit(db, "APPROVE_FUEL", "FuelTransaction", transaction.id, user_id=body.processed_by_id,
                    details={"vehicle_id": body.vehicle_id, "liters": body.liters,
                             "warning": transaction.warning_note})
    return transaction


@router.post("/verify/deny", response_model=FuelTransactionOut, summary="Deny a fill")
async def deny(body: FuelDenyRequest, db: Session = Depends(get_db)):
    transaction = station_service.deny_fuel(db, body.vehicle_id, body.station_id, body.processed_by_id,
                                            body.reason)
    await log_audit(db, "DENY_FUEL", "FuelTransaction", transaction.id, user_id=body.processed_by_id,
                    details={"vehicle_id": body.vehicle_id, "reason": body.reason})
    return transaction
