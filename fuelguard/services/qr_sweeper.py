# fuelguard/services/qr_sweeper.py
"""
QR expiry sweep — periodically deactivates registry rows whose midnight has passed.

Validation already rejects expired rows on its own; the sweep keeps the
"at most one active code per entity" view of the registry tidy for admins
and for get_or_generate.
"""

import asyncio
from sqlalchemy.exc import SQLAlchemyError
from fuelguard.database import SessionLocal
from fuelguard.services.qr_service import QRCodeService
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


def sweep_once(qr_service: QRCodeService, session_factory=SessionLocal) -> int:
    """Run one sweep in a fresh DB session."""
    db = session_factory()
    try:
        return qr_service.cleanup_expired(db)
    finally:
        db.close()


async def run_qr_sweeper(qr_service: QRCodeService, interval_seconds: int, session_factory=SessionLocal):
    """
    Loop forever, sweeping every `interval_seconds`.
    Started once at backend startup; errors are logged and the loop carries on.
    """
    logger.info(f"🧹 QR expiry sweep every {interval_seconds}s")
    while True:
        try:
            sweep_once(qr_service, session_factory)
        except SQLAlchemyError as e:
            logger.error(f"QR expiry sweep failed: {e}", exc_info=True)
        await asyncio.sleep(interval_seconds)
