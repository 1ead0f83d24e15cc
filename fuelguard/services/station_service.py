# fuelguard/services/station_service.py
"""
Station operator flows: scan → decide → approve / deny.

The engine only reports capacity; the approve flows here enforce the
operator's request against it (liters per fill, remaining bottles). The
eligibility re-check and the insert run in one transaction with the entity
row locked (SELECT ... FOR UPDATE), so two operators cannot both spend the
last slot of the same quota.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fuelguard.errors import DomainError, NotFoundError, QuotaGuardError
from fuelguard.models.household import Household
from fuelguard.models.station import Station
from fuelguard.models.transaction import FuelTransaction, GasBottleTransaction
from fuelguard.models.types import TransactionStatus, ExchangeType
from fuelguard.models.vehicle import Vehicle
from fuelguard.services.eligibility_service import EligibilityStatus
from fuelguard.services.qr_service import VehicleQRData, HouseholdQRData
from fuelguard.services.qr_validator import QRValidationResult, QRValidator
from fuelguard.services.quota_service import (
    FuelEligibilityResult,
    GasEligibilityResult,
    check_fuel_eligibility,
    check_gas_eligibility,
)
from fuelguard.services.transaction_service import record_fuel_transaction, record_gas_bottle_transaction
from fuelguard.services.vehicle_service import lookup_vehicle_by_plate
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ScanOutcome:
    validation: QRValidationResult
    fuel: Optional[FuelEligibilityResult] = None
    gas: Optional[GasEligibilityResult] = None


def get_station(db: Session, station_id: str) -> Station:
    station = db.query(Station).filter(Station.id == station_id, Station.is_active.is_(True)).first()
    if not station:
        raise NotFoundError("Station not found", code="station_not_found")
    return station


def station_wilaya(db: Session, station_id: Optional[str]) -> Optional[str]:
    """Wilaya of the operator's station; None for operators without a station (admins)."""
    return get_station(db, station_id).wilaya if station_id else None


def scan_qr(db: Session, qr_content: str, validator: QRValidator, station_id: Optional[str] = None,
            now: Optional[datetime] = None) -> ScanOutcome:
    wilaya = station_wilaya(db, station_id)
    validation = validator.validate(db, qr_content)
    if not validation.valid:
        logger.info(f"[SCAN] Rejected at station={station_id}: {validation.error}")
        return ScanOutcome(validation=validation)

    data = validation.data
    if isinstance(data, VehicleQRData):
        return ScanOutcome(validation=validation, fuel=check_fuel_eligibility(db, data.id, wilaya, now))
    return ScanOutcome(validation=validation, gas=check_gas_eligibility(db, data.id, wilaya, now))


def verify_household_qr(db: Session, qr_content: str, validator: QRValidator, station_id: Optional[str] = None,
                        now: Optional[datetime] = None) -> ScanOutcome:
    """Gas counter scan: only household codes are accepted."""
    wilaya = station_wilaya(db, station_id)
    validation = validator.validate(db, qr_content)
    if not validation.valid:
        return ScanOutcome(validation=validation)
    if not isinstance(validation.data, HouseholdQRData):
        raise DomainError(code="wrong_qr_type", http_status=400, message="Invalid household QR code")
    return ScanOutcome(validation=validation, gas=check_gas_eligibility(db, validation.data.id, wilaya, now))


def manual_lookup(db: Session, plate_number: str, station_id: Optional[str] = None,
                  now: Optional[datetime] = None) -> FuelEligibilityResult:
    wilaya = station_wilaya(db, station_id)
    vehicle = lookup_vehicle_by_plate(db, plate_number)
    if not vehicle:
        raise NotFoundError("Vehicle not found with this plate number", code="vehicle_not_found")
    return check_fuel_eligibility(db, vehicle.id, wilaya, now)


def _lock(db: Session, model, entity_id: str, label: str):
    entity = db.query(model).filter(model.id == entity_id).with_for_update().first()
    if not entity:
        raise NotFoundError(f"{label} not found", code=f"{label.lower()}_not_found")
    return entity


def approve_fuel(db: Session, vehicle_id: str, station_id: str, processed_by_id: str, liters: float,
                 now: Optional[datetime] = None) -> FuelTransaction:
    station = get_station(db, station_id)
    try:
        _lock(db, Vehicle, vehicle_id, "Vehicle")
        eligibility = check_fuel_eligibility(db, vehicle_id, station.wilaya, now)
        if not eligibility.eligible:
            raise QuotaGuardError("Cannot approve - vehicle is not eligible", code="not_eligible",
                                  details={"reason": eligibility.reason, "status": eligibility.status.value})
        if liters > eligibility.max_liters_allowed:
            raise QuotaGuardError(f"Cannot exceed {eligibility.max_liters_allowed}L for this vehicle type",
                                  code="liters_exceeded")

        transaction = record_fuel_transaction(
            db, vehicle_id, station.id, processed_by_id, TransactionStatus.APPROVED, liters=liters,
            warning_note=eligibility.reason if eligibility.status == EligibilityStatus.WARNING else None,
            now=now, commit=False,
        )
        db.commit()
    except (DomainError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(transaction)
    return transaction


def deny_fuel(db: Session, vehicle_id: str, station_id: str, processed_by_id: str, reason: str,
              now: Optional[datetime] = None) -> FuelTransaction:
    """Record a denial as-is; no eligibility re-run (manual override / audit trail)."""
    station = get_station(db, station_id)
    if not db.query(Vehicle).filter(Vehicle.id == vehicle_id).first():
        raise NotFoundError("Vehicle not found", code="vehicle_not_found")
    return record_fuel_transaction(db, vehicle_id, station.id, processed_by_id, TransactionStatus.DENIED,
                                   denial_reason=reason, now=now)


def record_gas(db: Session, household_id: str, station_id: str, processed_by_id: str,
               status: TransactionStatus, quantity: int, exchange_type: ExchangeType = ExchangeType.NEW,
               denial_reason: Optional[str] = None, now: Optional[datetime] = None) -> GasBottleTransaction:
    station = get_station(db, station_id)
    status = TransactionStatus(status)

    if status == TransactionStatus.DENIED:
        if not db.query(Household).filter(Household.id == household_id).first():
            raise NotFoundError("Household not found", code="household_not_found")
        return record_gas_bottle_transaction(db, household_id, station.id, processed_by_id, status, quantity,
                                             exchange_type, denial_reason=denial_reason, now=now)

    try:
        _lock(db, Household, household_id, "Household")
        eligibility = check_gas_eligibility(db, household_id, station.wilaya, now)
        if not eligibility.eligible:
            raise QuotaGuardError("Cannot approve - household not eligible", code="not_eligible",
                                  details={"reason": eligibility.reason, "status": eligibility.status.value})
        if quantity > eligibility.remaining_bottles:
            raise QuotaGuardError(f"Cannot exceed remaining quota of {eligibility.remaining_bottles} bottle(s)",
                                  code="bottles_exceeded")

        transaction = record_gas_bottle_transaction(
            db, household_id, station.id, processed_by_id, status, quantity, exchange_type,
            warning_note=eligibility.reason if eligibility.status == EligibilityStatus.WARNING else None,
            now=now, commit=False,
        )
        db.commit()
    except (DomainError, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(transaction)
    return transaction
