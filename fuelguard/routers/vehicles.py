# fuelguard/routers/vehicles.py
"""Vehicle registration, admin verification, daily QR and fuel eligibility."""

from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.models.types import QREntityType
from fuelguard.models.vehicle import Vehicle
from fuelguard.schemas.vehicle import VehicleCreate, VehicleOut, VehicleCustomLimits
from fuelguard.schemas.verification import fuel_eligibility_out
from fuelguard.services import vehicle_service
from fuelguard.services.audit_service import log_audit
from fuelguard.services.qr_service import QRCodeService, get_qr_service, render_data_url
from fuelguard.services.quota_service import check_fuel_eligibility
from fuelguard.services.station_service import station_wilaya

router = APIRouter()


@router.post("/vehicles", response_model=VehicleOut, summary="Register a vehicle")
async def register_vehicle(body: VehicleCreate, db: Session = Depends(get_db)):
    """New vehicles are unverified until an admin approves them."""
    vehicle = vehicle_service.register_vehicle(
        db, body.owner_id, body.plate_number, body.vehicle_type.value, body.fuel_type.value,
        brand=body.brand, model=body.model,
    )
    await log_audit(db, "REGISTER_VEHICLE", "Vehicle", vehicle.id, user_id=body.owner_id,
                    details={"plate_number": vehicle.plate_number})
    return vehicle


@router.get("/vehicles", response_model=list[VehicleOut], summary="List vehicles")
def list_vehicles(owner_id: Optional[str] = None, vehicle_type: Optional[str] = None,
                  is_verified: Optional[bool] = None, db: Session = Depends(get_db)):
    q = db.query(Vehicle)
    if owner_id:
        q = q.filter(Vehicle.owner_id == owner_id)
    if vehicle_type:
        q = q.filter(Vehicle.vehicle_type == vehicle_type)
    if is_verified is not None:
        q = q.filter(Vehicle.is_verified.is_(is_verified))
    return q.order_by(Vehicle.created_at.desc()).all()


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get a vehicle")
def get_vehicle(vehicle_id: str, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.put("/vehicles/{vehicle_id}/verify", response_model=VehicleOut, summary="Admin — verify a vehicle")
async def verify_vehicle(vehicle_id: str, db: Session = Depends(get_db)):
    vehicle = vehicle_service.set_vehicle_verified(db, vehicle_id, True)
    await log_audit(db, "VERIFY_VEHICLE", "Vehicle", vehicle_id)
    return vehicle


@router.delete("/vehicles/{vehicle_id}", summary="Deactivate a vehicle")
async def deactivate_vehicle(vehicle_id: str, db: Session = Depends(get_db)):
    vehicle = vehicle_service.deactivate_vehicle(db, vehicle_id)
    await log_audit(db, "DEACTIVATE_VEHICLE", "Vehicle", vehicle_id)
    return {"status": "deactivated", "id": vehicle.id}


@router.get("/vehicles/{vehicle_id}/qrcode", summary="Today's QR code for a vehicle")
def vehicle_qrcode(vehicle_id: str, db: Session = Depends(get_db),
                   qr_service: QRCodeService = Depends(get_qr_service)):
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    content = vehicle_service.issue_vehicle_qr(db, vehicle, qr_service)
    record = qr_service.get_active_record(db, QREntityType.VEHICLE, vehicle.id)
    return {
        "qr_content": content,
        "qr_image": render_data_url(content),
        "expires_at": record.expires_at.isoformat() if record else None,
    }


@router.get("/vehicles/{vehicle_id}/eligibility", summary="Fuel eligibility for a vehicle")
def vehicle_eligibility(vehicle_id: str, station_id: Optional[str] = None, db: Session = Depends(get_db)):
    result = check_fuel_eligibility(db, vehicle_id, station_wilaya(db, station_id))
    return fuel_eligibility_out(result)


@router.put("/vehicles/{vehicle_id}/limits", response_model=VehicleOut, summary="Admin — set per-vehicle limits")
async def set_vehicle_limits(vehicle_id: str, body: VehicleCustomLimits, db: Session = Depends(get_db)):
    """Only consulted by eligibility when APPLY_CUSTOM_VEHICLE_LIMITS is enabled."""
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    for field, value in body.model_dump().items():
        setattr(vehicle, field, value)
    db.commit()
    db.refresh(vehicle)
    await log_audit(db, "SET_VEHICLE_LIMITS", "Vehicle", vehicle_id, details=body.model_dump())
    return vehicle
