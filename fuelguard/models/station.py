# fuelguard/models/station.py
"""
Fuel / gas distribution stations. The station's wilaya drives
regional fuel rules and the gas-bottle wilaya restriction.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Boolean
from fuelguard.database import Base
from fuelguard.models.types import new_id


class Station(Base):
    __tablename__ = "stations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    code = Column(String(50), unique=True, nullable=False, index=True)
    address = Column(String(300))
    wilaya = Column(String(100), nullable=False, index=True)
    commune = Column(String(100))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<Station {self.code} wilaya={self.wilaya}>"
