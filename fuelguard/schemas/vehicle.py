# fuelguard/schemas/vehicle.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from fuelguard.models.types import VehicleType, FuelType


class VehicleCreate(BaseModel):
    owner_id: str
    plate_number: str
    vehicle_type: VehicleType
    fuel_type: FuelType
    brand: Optional[str] = None
    model: Optional[str] = None


class VehicleOut(BaseModel):
    id: str
    plate_number: str
    vehicle_type: str
    fuel_type: str
    brand: Optional[str]
    model: Optional[str]
    owner_id: str
    is_verified: bool
    is_active: bool
    custom_max_liters_per_fill: Optional[float] = None
    custom_max_fills_per_period: Optional[int] = None
    custom_period_hours: Optional[int] = None
    custom_limit_reason: Optional[str] = None
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class VehicleCustomLimits(BaseModel):
    custom_max_liters_per_fill: Optional[float] = None
    custom_max_fills_per_period: Optional[int] = None
    custom_period_hours: Optional[int] = None
    custom_limit_reason: Optional[str] = None
