# fuelguard/models/user.py
"""
Users table — citizens who own vehicles/households, station managers, admins.
Only the fields the quota engine reads (national ID, flag) are modelled here.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Boolean
from fuelguard.database import Base
from fuelguard.models.types import new_id, UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(String(200), nullable=False)
    national_id = Column(String(50), unique=True, index=True)
    phone = Column(String(30))
    role = Column(String(30), nullable=False, default=UserRole.CITIZEN.value)
    is_flagged = Column(Boolean, default=False, nullable=False)
    flag_reason = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<User {self.id} name={self.full_name} role={self.role} flagged={self.is_flagged}>"
