# fuelguard/models/quota_rule.py
"""
Admin-configured quota policies.
FuelRule is keyed by (vehicle_type, wilaya) — wilaya "ALL" or NULL is the national default.
GasBottleRule is keyed by a household-size band; max_member_count NULL means unbounded.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, String, DateTime, Boolean, UniqueConstraint
from fuelguard.database import Base


class FuelRule(Base):
    __tablename__ = "fuel_rules"
    __table_args__ = (UniqueConstraint("vehicle_type", "wilaya", name="uq_fuel_rule_type_wilaya"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_type = Column(String(30), nullable=False, index=True)
    wilaya = Column(String(100))
    max_fills_per_period = Column(Integer, nullable=False)
    period_hours = Column(Integer, nullable=False)
    max_liters_per_fill = Column(Float, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return (f"<FuelRule {self.vehicle_type}/{self.wilaya} "
                f"{self.max_fills_per_period} per {self.period_hours}h>")


class GasBottleRule(Base):
    __tablename__ = "gas_bottle_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    min_member_count = Column(Integer, nullable=False)
    max_member_count = Column(Integer)
    max_bottles_per_period = Column(Integer, nullable=False)
    period_days = Column(Integer, nullable=False)
    bottle_size = Column(Integer, default=13, nullable=False)   # kg
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        upper = self.max_member_count if self.max_member_count is not None else "+"
        return f"<GasBottleRule {self.min_member_count}-{upper} {self.max_bottles_per_period} per {self.period_days}d>"
