# fuelguard/schemas/verification.py
"""
Station-side request bodies and the eligibility response shape
returned by scan / lookup / gas verify / entity eligibility endpoints.
"""

from pydantic import BaseModel, Field
from typing import Optional
from fuelguard.models.types import TransactionStatus, ExchangeType


class ScanRequest(BaseModel):
    qr_content: str
    station_id: Optional[str] = None


class LookupRequest(BaseModel):
    plate_number: str
    station_id: Optional[str] = None


class FuelApproveRequest(BaseModel):
    vehicle_id: str
    station_id: str
    processed_by_id: str
    liters: float = Field(gt=0)


class FuelDenyRequest(BaseModel):
    vehicle_id: str
    station_id: str
    processed_by_id: str
    reason: str


class GasVerifyRequest(BaseModel):
    qr_content: str
    station_id: Optional[str] = None


class GasTransactionRequest(BaseModel):
    household_id: str
    station_id: str
    processed_by_id: str
    quantity: int = Field(ge=1, le=5)
    status: TransactionStatus = TransactionStatus.APPROVED
    exchange_type: ExchangeType = ExchangeType.NEW
    denial_reason: Optional[str] = None


def _blacklist_out(info) -> Optional[dict]:
    if info is None or not info.is_blacklisted:
        return None
    return {"severity": info.severity.value if info.severity else None, "reason": info.reason}


def fuel_eligibility_out(result) -> dict:
    vehicle = result.vehicle
    return {
        "status": result.status.value,
        "eligible": result.eligible,
        "reason": result.reason,
        "vehicle": {
            "id": vehicle.id,
            "plate_number": vehicle.plate_number,
            "vehicle_type": vehicle.vehicle_type,
            "fuel_type": vehicle.fuel_type,
            "owner_name": vehicle.owner.full_name if vehicle.owner else None,
        },
        "quota": {
            "fills_in_period": result.fills_in_period,
            "max_fills_allowed": result.max_fills_allowed,
            "max_liters_allowed": result.max_liters_allowed,
            "period_hours": result.period_hours,
            "next_eligible_at": result.next_eligible_at.isoformat() if result.next_eligible_at else None,
            "hours_until_next_fill": result.hours_until_next_fill,
        },
        "last_fill": {
            "date": result.last_fill_date.isoformat(),
            "liters": result.last_fill_liters,
        } if result.last_fill_date else None,
        "blacklist": _blacklist_out(result.blacklist_info),
    }


def gas_eligibility_out(result) -> dict:
    household = result.household
    return {
        "status": result.status.value,
        "eligible": result.eligible,
        "reason": result.reason,
        "household": {
            "id": household.id,
            "full_name": household.full_name,
            "wilaya": household.wilaya,
            "member_count": household.member_count,
        },
        "quota": {
            "bottles_in_period": result.bottles_in_period,
            "max_bottles_allowed": result.max_bottles_allowed,
            "remaining_bottles": result.remaining_bottles,
            "period_days": result.period_days,
            "bottle_size": result.rule.bottle_size if result.rule else None,
            "next_eligible_at": result.next_eligible_at.isoformat() if result.next_eligible_at else None,
            "days_until_next_purchase": result.days_until_next_purchase,
        },
        "last_purchase_date": result.last_purchase_date.isoformat() if result.last_purchase_date else None,
        "blacklist": _blacklist_out(result.blacklist_info),
    }
