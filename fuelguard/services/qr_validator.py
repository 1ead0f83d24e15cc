# fuelguard/services/qr_validator.py
"""
Scanned QR validation, short-circuiting in this order:
  1. format     — JSON object with type/id/signature and a known type
  2. signature  — recomputed over the signed fields (catches corruption and forgery)
  3. registry   — row keyed by sign(raw payload) must exist
  4. active     — superseded codes are rejected even though their signature verifies
  5. expiry     — next-midnight expiry
"""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional

from sqlalchemy.orm import Session

from fuelguard.models.qr_code import QRCode
from fuelguard.services.qr_service import QRData, VehicleQRData, HouseholdQRData, signing_string
from fuelguard.services.signature_service import SignatureService, get_signature_service
from fuelguard.utils.clock import local_now
from fuelguard.utils.json_parser import safe_parse_json
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)

ERR_FORMAT = "Invalid QR code format"
ERR_SIGNATURE = "Invalid QR code signature - possible tampering"
ERR_NOT_REGISTERED = "QR code not registered in system"
ERR_DEACTIVATED = "QR code has been deactivated"
ERR_EXPIRED = "QR code has expired - please regenerate"


@dataclass
class QRValidationResult:
    valid: bool
    expired: bool
    data: Optional[QRData]
    error: Optional[str] = None


def _utf8_encodable(*values) -> bool:
    try:
        for value in values:
            str(value).encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def parse_qr_content(content: str) -> Optional[QRData]:
    """Typed payload, or None if the content is not a well-formed QR payload."""
    # JSON escapes can smuggle lone surrogates, which cannot be signed
    if not isinstance(content, (str, bytes)) or (isinstance(content, str) and not _utf8_encodable(content)):
        return None
    data = safe_parse_json(content)
    if not data:
        return None
    if not data.get("type") or not data.get("id") or not data.get("signature"):
        return None
    signed = (data["type"], data["id"], data.get("plate"), data.get("nationalId"), data.get("timestamp"),
              data.get("hash"), data["signature"])
    if not _utf8_encodable(*signed):
        return None

    common = {
        "id": data["id"],
        "timestamp": data.get("timestamp"),
        "hash": data.get("hash"),
        "signature": data["signature"],
    }
    if data["type"] == "vehicle":
        return VehicleQRData(plate=data.get("plate"), **common)
    if data["type"] == "household":
        return HouseholdQRData(national_id=data.get("nationalId"), **common)
    return None


class QRValidator:
    def __init__(self, signer: SignatureService, clock: Callable[[], datetime] = local_now):
        self.signer = signer
        self.clock = clock

    def verify_signature(self, data: QRData) -> bool:
        signed = signing_string(data.type, data.id, data.bound_value, data.timestamp, data.hash)
        return self.signer.verify(signed, data.signature)

    def validate(self, db: Session, content: str) -> QRValidationResult:
        data = parse_qr_content(content)
        if data is None:
            return QRValidationResult(valid=False, expired=False, data=None, error=ERR_FORMAT)

        if not self.verify_signature(data):
            logger.warning(f"[QR] Signature mismatch for {data.type}:{data.id}")
            return QRValidationResult(valid=False, expired=False, data=data, error=ERR_SIGNATURE)

        record = db.query(QRCode).filter(QRCode.code_hash == self.signer.sign(content)).first()
        if not record:
            logger.warning(f"[QR] Unregistered code for {data.type}:{data.id}")
            return QRValidationResult(valid=False, expired=False, data=data, error=ERR_NOT_REGISTERED)

        if not record.is_active:
            return QRValidationResult(valid=False, expired=True, data=data, error=ERR_DEACTIVATED)

        if record.expires_at < self.clock():
            return QRValidationResult(valid=False, expired=True, data=data, error=ERR_EXPIRED)

        return QRValidationResult(valid=True, expired=False, data=data)


@lru_cache()
def get_qr_validator() -> QRValidator:
    return QRValidator(get_signature_service())
