# fuelguard/schemas/blacklist.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from fuelguard.models.types import BlacklistSeverity


class BlacklistCreate(BaseModel):
    national_id: Optional[str] = None
    plate_number: Optional[str] = None
    reason: str
    severity: BlacklistSeverity = BlacklistSeverity.WARNING
    notes: Optional[str] = None
    added_by_id: Optional[str] = None
    expires_at: Optional[datetime] = None   # None = permanent


class BlacklistOut(BaseModel):
    id: str
    national_id: Optional[str]
    plate_number: Optional[str]
    reason: str
    severity: str
    notes: Optional[str]
    expires_at: Optional[datetime]
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class FlagRequest(BaseModel):
    reason: str
