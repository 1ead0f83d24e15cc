# tests/test_qr_service.py
"""QR issuance and registry: payload shape, same-day idempotence, supersession, expiry sweep."""

import json
import pytest
from datetime import datetime
from fuelguard.models.qr_code import QRCode
from fuelguard.models.types import QREntityType
from fuelguard.services.qr_service import QRCodeService, render_data_url
from fuelguard.utils.clock import epoch_millis


@pytest.fixture
def qr_service(signer, clock):
    return QRCodeService(signer, clock=clock)


class TestPayload:
    def test_vehicle_payload_fields_in_order(self, qr_service, clock):
        payload = qr_service.build_payload(QREntityType.VEHICLE, "veh-1", "12345-116-31", clock())
        data = payload.to_dict()
        assert list(data.keys()) == ["type", "id", "plate", "timestamp", "hash", "signature"]
        assert data["type"] == "vehicle"
        assert data["plate"] == "12345-116-31"
        assert data["timestamp"] == epoch_millis(clock())
        assert len(data["hash"]) == 16

    def test_household_payload_hides_national_id(self, qr_service, signer, clock):
        payload = qr_service.build_payload(QREntityType.HOUSEHOLD, "hh-1", "1987654321", clock())
        data = payload.to_dict()
        assert list(data.keys()) == ["type", "id", "nationalId", "timestamp", "hash", "signature"]
        assert data["nationalId"] != "1987654321"
        assert data["nationalId"] == signer.sign("1987654321")[:16]

    def test_signature_covers_all_bound_fields(self, qr_service, signer, clock):
        data = qr_service.build_payload(QREntityType.VEHICLE, "veh-1", "P-1", clock()).to_dict()
        signed = f"vehicle:veh-1:P-1:{data['timestamp']}:{data['hash']}"
        assert signer.verify(signed, data["signature"])


class TestRegistry:
    def test_same_day_returns_identical_payload(self, db, qr_service, clock):
        first = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        clock.advance(hours=3)
        second = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert first == second
        assert db.query(QRCode).count() == 1

    def test_expires_at_next_midnight(self, db, qr_service, clock):
        qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        record = qr_service.get_active_record(db, QREntityType.VEHICLE, "veh-1")
        assert record.expires_at == datetime(2025, 3, 11, 0, 0, 0)

    def test_registry_key_is_hmac_of_content(self, db, qr_service, signer):
        content = qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        record = db.query(QRCode).one()
        assert record.code_hash == signer.sign(content)
        assert record.code_data == content

    def test_after_midnight_new_payload_and_old_deactivated(self, db, qr_service, clock):
        old = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        clock.advance(days=1)
        new = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert new != old
        active = db.query(QRCode).filter(QRCode.is_active.is_(True)).all()
        assert [r.code_data for r in active] == [new]

    def test_regenerate_supersedes_active_code(self, db, qr_service, clock):
        qr_service.generate(db, QREntityType.HOUSEHOLD, "hh-1", "NID-1")
        clock.advance(minutes=5)
        qr_service.generate(db, QREntityType.HOUSEHOLD, "hh-1", "NID-1")
        assert db.query(QRCode).filter(QRCode.is_active.is_(True)).count() == 1
        assert db.query(QRCode).count() == 2

    def test_entities_do_not_share_codes(self, db, qr_service):
        a = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        b = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-2", "P-2")
        assert a != b
        assert db.query(QRCode).filter(QRCode.is_active.is_(True)).count() == 2

    def test_cleanup_expired(self, db, qr_service, clock):
        qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert qr_service.cleanup_expired(db) == 0
        clock.advance(days=1)
        assert qr_service.cleanup_expired(db) == 1
        assert db.query(QRCode).filter(QRCode.is_active.is_(True)).count() == 0


class TestRendering:
    def test_data_url_is_png(self):
        url = render_data_url(json.dumps({"type": "vehicle", "id": "x"}))
        assert url.startswith("data:image/png;base64,")
