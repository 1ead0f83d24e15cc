# fuelguard/services/vehicle_service.py
"""
Vehicle lookup and lifecycle helpers.
Used by the vehicles router and the station operator flows.
"""

from typing import Optional

from sqlalchemy.orm import Session

from fuelguard.errors import DomainError, NotFoundError
from fuelguard.models.types import QREntityType
from fuelguard.models.user import User
from fuelguard.models.vehicle import Vehicle
from fuelguard.services.qr_service import QRCodeService
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


def lookup_vehicle_by_plate(db: Session, plate_number: str) -> Optional[Vehicle]:
    """Find a registered vehicle by plate number. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.plate_number == plate_number).first()


def get_vehicle(db: Session, vehicle_id: str) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFoundError("Vehicle not found", code="vehicle_not_found")
    return vehicle


def register_vehicle(db: Session, owner_id: str, plate_number: str, vehicle_type: str, fuel_type: str,
                     brand: Optional[str] = None, model: Optional[str] = None) -> Vehicle:
    """New vehicles start unverified and wait for admin approval."""
    if not db.query(User).filter(User.id == owner_id).first():
        raise NotFoundError("Owner not found", code="owner_not_found")
    if lookup_vehicle_by_plate(db, plate_number):
        raise DomainError(code="plate_taken", http_status=400,
                          message=f"Plate {plate_number} already registered")

    vehicle = Vehicle(owner_id=owner_id, plate_number=plate_number, vehicle_type=vehicle_type,
                      fuel_type=fuel_type, brand=brand, model=model, is_verified=False, is_active=True)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info(f"[VEHICLE] Registered {plate_number} ({vehicle_type}) owner={owner_id}")
    return vehicle


def set_vehicle_verified(db: Session, vehicle_id: str, verified: bool = True) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    vehicle.is_verified = verified
    db.commit()
    logger.info(f"[VEHICLE] {vehicle.plate_number} verified={verified}")
    return vehicle


def deactivate_vehicle(db: Session, vehicle_id: str) -> Vehicle:
    """Soft delete — history must stay attached to the vehicle."""
    vehicle = get_vehicle(db, vehicle_id)
    vehicle.is_active = False
    db.commit()
    logger.info(f"[VEHICLE] {vehicle.plate_number} deactivated")
    return vehicle


def issue_vehicle_qr(db: Session, vehicle: Vehicle, qr_service: QRCodeService) -> str:
    """Current payload for a verified vehicle, cached on the vehicle row."""
    if not vehicle.is_active:
        raise DomainError(code="vehicle_inactive", http_status=400, message="Vehicle is deactivated")
    if not vehicle.is_verified:
        raise DomainError(code="vehicle_unverified", http_status=400,
                          message="Vehicle is not yet verified. Please wait for admin approval.")

    content = qr_service.get_or_generate(db, QREntityType.VEHICLE, vehicle.id, vehicle.plate_number)
    if vehicle.qr_code_data != content:
        vehicle.qr_code_data = content
        db.commit()
    return content
