# fuelguard/routers/gas.py
"""Gas bottle counter: verify a household QR, then record the sale or refusal."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.routers.verification import invalid_qr_response
from fuelguard.schemas.transaction import GasBottleTransactionOut
from fuelguard.schemas.verification import GasVerifyRequest, GasTransactionRequest, gas_eligibility_out
from fuelguard.services import station_service
from fuelguard.services.audit_service import log_audit
from fuelguard.services.qr_validator import QRValidator, get_qr_validator

router = APIRouter()


@router.post("/gas/verify", summary="Verify a household QR code")
def verify(body: GasVerifyRequest, db: Session = Depends(get_db),
           validator: QRValidator = Depends(get_qr_validator)):
    outcome = station_service.verify_household_qr(db, body.qr_content, validator, body.station_id)
    if not outcome.validation.valid:
        return invalid_qr_response(outcome.validation)
    return gas_eligibility_out(outcome.gas)


@router.post("/gas/transactions", response_model=GasBottleTransactionOut, summary="Record a gas bottle sale")
async def record(body: GasTransactionRequest, db: Session = Depends(get_db)):
    transaction = station_service.record_gas(
        db, body.household_id, body.station_id, body.processed_by_id, body.status, body.quantity,
        body.exchange_type, denial_reason=body.denial_reason,
    )
    await log_audit(db, f"{transaction.status}_GAS", "GasBottleTransaction", transaction.id,
                    user_id=body.processed_by_id,
                    details={"household_id": body.household_id, "quantity": body.quantity,
                             "exchange_type": transaction.exchange_type})
    return transaction
