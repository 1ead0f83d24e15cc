# fuelguard/models/vehicle.py
"""
Registered vehicles table — fuel quota subjects, looked up by id (QR scan)
or plate number (manual lookup). Soft-deleted via is_active so the
transaction history stays intact.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from fuelguard.database import Base
from fuelguard.models.types import new_id


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=new_id)
    plate_number = Column(String(50), unique=True, nullable=False, index=True)
    vehicle_type = Column(String(30), nullable=False)   # VehicleType
    fuel_type = Column(String(20), nullable=False)      # FuelType
    brand = Column(String(100))
    model = Column(String(100))
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    qr_code_data = Column(Text)                          # cached current QR payload

    # Per-vehicle overrides (only read when APPLY_CUSTOM_VEHICLE_LIMITS is on)
    custom_max_liters_per_fill = Column(Float)
    custom_max_fills_per_period = Column(Integer)
    custom_period_hours = Column(Integer)
    custom_limit_reason = Column(Text)

    created_at = Column(DateTime, default=datetime.now)

    owner = relationship("User")

    def __repr__(self):
        return f"<Vehicle {self.plate_number} type={self.vehicle_type} verified={self.is_verified}>"
