# fuelguard/schemas/station.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class StationCreate(BaseModel):
    name: str
    code: str
    wilaya: str
    commune: Optional[str] = None
    address: Optional[str] = None


class StationOut(BaseModel):
    id: str
    name: str
    code: str
    wilaya: str
    commune: Optional[str]
    address: Optional[str]
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
