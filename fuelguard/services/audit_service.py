# fuelguard/services/audit_service.py
"""
Shared audit sink.
Used by the verification, gas, blacklist and rule routers after the primary
write has been committed. Fire-and-forget: a failure here is logged and
rolled back, never raised to the caller.
"""

import json
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from fuelguard.models.audit_log import AuditLog
from fuelguard.utils.clock import local_now
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


async def log_audit(db: Session, action, entity_type=None, entity_id=None, user_id=None, details=None):
    """Persist an audit record. Never raises."""
    try:
        db.add(AuditLog(action=action, entity_type=entity_type, entity_id=entity_id, user_id=user_id,
                        details=json.dumps(details, default=str) if details is not None else None,
                        created_at=local_now()))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[AUDIT] Failed to record {action} for {entity_type}:{entity_id}: {e}")
        return
    logger.debug(f"[AUDIT][{action}] {entity_type}:{entity_id} by {user_id}")
