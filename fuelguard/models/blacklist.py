# fuelguard/models/blacklist.py
"""
Blacklist entries by national ID and/or plate number.
expires_at NULL means permanent. Entries are deactivated, never deleted.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Boolean
from fuelguard.database import Base
from fuelguard.models.types import new_id, BlacklistSeverity


class Blacklist(Base):
    __tablename__ = "blacklist"

    id = Column(String(36), primary_key=True, default=new_id)
    national_id = Column(String(50), index=True)
    plate_number = Column(String(50), index=True)
    reason = Column(Text, nullable=False)
    severity = Column(String(20), nullable=False, default=BlacklistSeverity.WARNING.value)
    notes = Column(Text)
    added_by_id = Column(String(36))
    expires_at = Column(DateTime)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<Blacklist {self.national_id or self.plate_number} severity={self.severity} active={self.is_active}>"
