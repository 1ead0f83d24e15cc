# fuelguard/schemas/user.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from fuelguard.models.types import UserRole


class UserCreate(BaseModel):
    full_name: str
    national_id: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.CITIZEN


class UserOut(BaseModel):
    id: str
    full_name: str
    phone: Optional[str]
    role: str
    is_flagged: bool
    flag_reason: Optional[str]
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
