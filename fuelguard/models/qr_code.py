# fuelguard/models/qr_code.py
"""
QR code registry. One row per issued payload; code_hash is the HMAC of the
full payload and is what the validator looks up. At most one row per entity
is active at a time.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from fuelguard.database import Base


class QRCode(Base):
    __tablename__ = "qr_codes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String(20), nullable=False)      # QREntityType
    entity_id = Column(String(36), nullable=False, index=True)
    code_hash = Column(String(64), unique=True, nullable=False, index=True)
    code_data = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<QRCode {self.entity_type}:{self.entity_id} active={self.is_active} expires={self.expires_at}>"
