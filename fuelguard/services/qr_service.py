# fuelguard/services/qr_service.py
"""
QR issuance and registry.

Payload (compact JSON, fixed key order):
    {"type", "id", "plate" | "nationalId", "timestamp", "hash", "signature"}

  - hash      : first 16 hex chars of sha256("type:id:timestamp:secret"), a per-issuance nonce
  - nationalId: first 16 hex chars of sign(national_id) — the raw ID never leaves the server
  - signature : sign("type:id:bound:timestamp:hash")

The registry row is keyed by sign(<whole payload string>) and expires at the
next local midnight. Only one row per entity is active at a time.
"""

import base64
import hashlib
import io
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional, Union

import qrcode
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fuelguard.models.qr_code import QRCode
from fuelguard.models.types import QREntityType
from fuelguard.services.signature_service import SignatureService, get_signature_service
from fuelguard.utils.clock import local_now, next_midnight, epoch_millis
from fuelguard.utils.json_parser import dump_compact
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)

NONCE_LENGTH = 16


@dataclass
class VehicleQRData:
    id: str
    plate: str
    timestamp: int
    hash: str
    signature: str
    type: str = "vehicle"

    @property
    def bound_value(self) -> str:
        return self.plate

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.id, "plate": self.plate,
                "timestamp": self.timestamp, "hash": self.hash, "signature": self.signature}


@dataclass
class HouseholdQRData:
    id: str
    national_id: str          # hashed, never the raw national ID
    timestamp: int
    hash: str
    signature: str
    type: str = "household"

    @property
    def bound_value(self) -> str:
        return self.national_id

    def to_dict(self) -> dict:
        return {"type": self.type, "id": self.id, "nationalId": self.national_id,
                "timestamp": self.timestamp, "hash": self.hash, "signature": self.signature}


QRData = Union[VehicleQRData, HouseholdQRData]


def signing_string(payload_type: str, entity_id, bound_value, timestamp, nonce) -> str:
    return f"{payload_type}:{entity_id}:{bound_value}:{timestamp}:{nonce}"


class QRCodeService:
    """Issues signed payloads and keeps the registry consistent."""

    def __init__(self, signer: SignatureService, clock: Callable[[], datetime] = local_now):
        self.signer = signer
        self.clock = clock

    def issuance_nonce(self, payload_type: str, entity_id: str, timestamp: int) -> str:
        data = f"{payload_type}:{entity_id}:{timestamp}:{self.signer.secret}"
        return hashlib.sha256(data.encode("utf-8")).hexdigest()[:NONCE_LENGTH]

    def hash_national_id(self, national_id: str) -> str:
        return self.signer.sign(national_id)[:NONCE_LENGTH]

    def registry_key(self, content: str) -> str:
        return self.signer.sign(content)

    def build_payload(self, entity_type: QREntityType, entity_id: str, bound_value: str,
                      issued_at: datetime) -> QRData:
        payload_type = entity_type.payload_type
        timestamp = epoch_millis(issued_at)
        nonce = self.issuance_nonce(payload_type, entity_id, timestamp)

        if entity_type == QREntityType.HOUSEHOLD:
            bound_value = self.hash_national_id(bound_value)

        signature = self.signer.sign(signing_string(payload_type, entity_id, bound_value, timestamp, nonce))
        if entity_type == QREntityType.VEHICLE:
            return VehicleQRData(id=entity_id, plate=bound_value, timestamp=timestamp,
                                 hash=nonce, signature=signature)
        return HouseholdQRData(id=entity_id, national_id=bound_value, timestamp=timestamp,
                               hash=nonce, signature=signature)

    def generate(self, db: Session, entity_type: QREntityType, entity_id: str, bound_value: str) -> str:
        """
        Issue a fresh payload, superseding any active one for the entity.
        Deactivation and insert are committed as one transaction.
        """
        now = self.clock()
        content = dump_compact(self.build_payload(entity_type, entity_id, bound_value, now).to_dict())
        expires_at = next_midnight(now)

        try:
            superseded = (
                db.query(QRCode)
                .filter(
                    QRCode.entity_type == entity_type.value,
                    QRCode.entity_id == entity_id,
                    QRCode.is_active.is_(True),
                )
                .update({QRCode.is_active: False}, synchronize_session=False)
            )
            db.add(QRCode(
                entity_type=entity_type.value,
                entity_id=entity_id,
                code_hash=self.registry_key(content),
                code_data=content,
                expires_at=expires_at,
                is_active=True,
                created_at=now,
            ))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        logger.info(f"[QR] Issued {entity_type.value}:{entity_id} expires={expires_at.isoformat()} "
                    f"superseded={superseded}")
        return content

    def get_active_record(self, db: Session, entity_type: QREntityType, entity_id: str) -> Optional[QRCode]:
        """The active, unexpired registry row for an entity, if any."""
        return (
            db.query(QRCode)
            .filter(
                QRCode.entity_type == entity_type.value,
                QRCode.entity_id == entity_id,
                QRCode.is_active.is_(True),
                QRCode.expires_at > self.clock(),
            )
            .order_by(QRCode.created_at.desc())
            .first()
        )

    def get_or_generate(self, db: Session, entity_type: QREntityType, entity_id: str, bound_value: str) -> str:
        """Current valid payload for the entity — same string for the whole day."""
        existing = self.get_active_record(db, entity_type, entity_id)
        if existing:
            return existing.code_data
        return self.generate(db, entity_type, entity_id, bound_value)

    def cleanup_expired(self, db: Session) -> int:
        """Deactivate active rows whose expiry has passed. Returns how many."""
        count = (
            db.query(QRCode)
            .filter(QRCode.is_active.is_(True), QRCode.expires_at < self.clock())
            .update({QRCode.is_active: False}, synchronize_session=False)
        )
        db.commit()
        if count:
            logger.info(f"[QR] Expiry sweep deactivated {count} code(s)")
        return count


def render_data_url(content: str) -> str:
    """PNG data URL for a payload, as shown to the citizen."""
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_H, box_size=10, border=2)
    qr.add_data(content)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


@lru_cache()
def get_qr_service() -> QRCodeService:
    return QRCodeService(get_signature_service())
