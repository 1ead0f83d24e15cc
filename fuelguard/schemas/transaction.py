# fuelguard/schemas/transaction.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class FuelTransactionOut(BaseModel):
    id: str
    vehicle_id: str
    station_id: str
    processed_by_id: str
    status: str
    liters: Optional[float]
    denial_reason: Optional[str]
    warning_note: Optional[str]
    created_at: datetime
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class GasBottleTransactionOut(BaseModel):
    id: str
    household_id: str
    station_id: str
    processed_by_id: str
    status: str
    quantity: int
    exchange_type: str
    denial_reason: Optional[str]
    warning_note: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
