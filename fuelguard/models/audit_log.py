# fuelguard/models/audit_log.py
"""
Audit log table — scans, approvals, denials, blacklist and rule changes.
Written by audit_service; never read by the quota engine.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text
from fuelguard.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36))
    action = Column(String(50), nullable=False, index=True)
    entity_type = Column(String(30))
    entity_id = Column(String(36))
    details = Column(Text)                # JSON-encoded
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.id} action={self.action} entity={self.entity_type}:{self.entity_id}>"
