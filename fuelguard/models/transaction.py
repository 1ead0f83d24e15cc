# fuelguard/models/transaction.py
"""
Append-only transaction log — one row per approve/deny decision at a station.
APPROVED rows are the only input to rolling-window quota consumption.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from fuelguard.database import Base
from fuelguard.models.types import new_id, ExchangeType


class FuelTransaction(Base):
    __tablename__ = "fuel_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    station_id = Column(String(36), ForeignKey("stations.id"), nullable=False, index=True)
    processed_by_id = Column(String(36), nullable=False)
    status = Column(String(20), nullable=False, index=True)   # TransactionStatus
    liters = Column(Float)
    denial_reason = Column(Text)
    warning_note = Column(Text)                               # set when approved under WARNING
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    completed_at = Column(DateTime)

    vehicle = relationship("Vehicle")
    station = relationship("Station")

    def __repr__(self):
        return f"<FuelTransaction {self.id} vehicle={self.vehicle_id} status={self.status} liters={self.liters}>"


class GasBottleTransaction(Base):
    __tablename__ = "gas_bottle_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    household_id = Column(String(36), ForeignKey("households.id"), nullable=False, index=True)
    station_id = Column(String(36), ForeignKey("stations.id"), nullable=False, index=True)
    processed_by_id = Column(String(36), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    exchange_type = Column(String(20), nullable=False, default=ExchangeType.NEW.value)
    denial_reason = Column(Text)
    warning_note = Column(Text)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    household = relationship("Household")
    station = relationship("Station")

    def __repr__(self):
        return f"<GasBottleTransaction {self.id} household={self.household_id} status={self.status} qty={self.quantity}>"
