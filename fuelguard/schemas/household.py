# fuelguard/schemas/household.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class HouseholdCreate(BaseModel):
    owner_id: str
    national_id: str
    full_name: str
    wilaya: str
    commune: Optional[str] = None
    address: Optional[str] = None
    member_count: int = Field(ge=1, le=20)


class HouseholdOut(BaseModel):
    id: str
    full_name: str
    address: Optional[str]
    wilaya: str
    commune: Optional[str]
    member_count: int
    owner_id: str
    is_verified: bool
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
