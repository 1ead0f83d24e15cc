# fuelguard/models/household.py
"""
Registered households table — gas-bottle quota subjects.
memberCount selects the household-size band; wilaya is a hard purchase boundary.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from fuelguard.database import Base
from fuelguard.models.types import new_id


class Household(Base):
    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=new_id)
    national_id = Column(String(50), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    address = Column(String(300))
    wilaya = Column(String(100), nullable=False)
    commune = Column(String(100))
    member_count = Column(Integer, nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    qr_code_data = Column(Text)
    created_at = Column(DateTime, default=datetime.now)

    owner = relationship("User")

    def __repr__(self):
        return f"<Household {self.id} wilaya={self.wilaya} members={self.member_count}>"
