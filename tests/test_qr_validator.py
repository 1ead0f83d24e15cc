# tests/test_qr_validator.py
"""Validation layering: format → signature → registry → active → expiry."""

import json
import pytest
from fuelguard.models.qr_code import QRCode
from fuelguard.models.types import QREntityType
from fuelguard.services.qr_service import QRCodeService, VehicleQRData, HouseholdQRData
from fuelguard.services.qr_validator import (
    QRValidator,
    parse_qr_content,
    ERR_FORMAT,
    ERR_SIGNATURE,
    ERR_NOT_REGISTERED,
    ERR_DEACTIVATED,
    ERR_EXPIRED,
)
from fuelguard.services.signature_service import SignatureService
from fuelguard.utils.json_parser import dump_compact


@pytest.fixture
def qr_service(signer, clock):
    return QRCodeService(signer, clock=clock)


@pytest.fixture
def validator(signer, clock):
    return QRValidator(signer, clock=clock)


def tamper(content: str, **changes) -> str:
    data = json.loads(content)
    data.update(changes)
    return dump_compact(data)


class TestParse:
    def test_vehicle(self):
        data = parse_qr_content('{"type":"vehicle","id":"v1","plate":"P","timestamp":1,"hash":"h","signature":"s"}')
        assert isinstance(data, VehicleQRData)
        assert data.plate == "P"

    def test_household(self):
        data = parse_qr_content('{"type":"household","id":"h1","nationalId":"n","signature":"s"}')
        assert isinstance(data, HouseholdQRData)
        assert data.national_id == "n"

    @pytest.mark.parametrize("raw", [
        "not json",
        "[1, 2, 3]",
        '{"type":"vehicle","id":"v1"}',
        '{"type":"bus","id":"v1","signature":"s"}',
        '{"id":"v1","signature":"s"}',
    ])
    def test_rejects_malformed(self, raw):
        assert parse_qr_content(raw) is None


class TestValidate:
    def test_fresh_code_is_valid(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        result = validator.validate(db, content)
        assert result.valid is True
        assert result.expired is False
        assert result.data.id == "veh-1"

    def test_household_code_is_valid(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.HOUSEHOLD, "hh-1", "NID-1")
        result = validator.validate(db, content)
        assert result.valid is True
        assert isinstance(result.data, HouseholdQRData)

    def test_format_error(self, db, validator):
        result = validator.validate(db, "garbage")
        assert result.valid is False
        assert result.error == ERR_FORMAT
        assert result.data is None

    def test_tampered_plate_fails_at_signature(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        result = validator.validate(db, tamper(content, plate="P-2"))
        assert result.valid is False
        assert result.expired is False
        assert result.error == ERR_SIGNATURE

    def test_tampered_id_fails_at_signature(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert validator.validate(db, tamper(content, id="veh-2")).error == ERR_SIGNATURE

    def test_missing_bound_field_fails_at_signature(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        data = json.loads(content)
        del data["plate"]
        assert validator.validate(db, dump_compact(data)).error == ERR_SIGNATURE

    def test_foreign_secret_fails_at_signature(self, db, clock, validator):
        rogue = QRCodeService(SignatureService("rogue-secret"), clock=clock)
        content = rogue.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert validator.validate(db, content).error == ERR_SIGNATURE

    def test_signed_but_unregistered(self, db, qr_service, validator, clock):
        payload = qr_service.build_payload(QREntityType.VEHICLE, "veh-1", "P-1", clock())
        result = validator.validate(db, dump_compact(payload.to_dict()))
        assert result.error == ERR_NOT_REGISTERED
        assert result.expired is False

    def test_reserialised_payload_is_not_registered(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        assert validator.validate(db, json.dumps(json.loads(content))).error == ERR_NOT_REGISTERED

    def test_superseded_code_is_deactivated(self, db, qr_service, validator, clock):
        old = qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        clock.advance(minutes=1)
        qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        result = validator.validate(db, old)
        assert result.valid is False
        assert result.expired is True
        assert result.error == ERR_DEACTIVATED

    def test_code_expires_after_midnight(self, db, qr_service, validator, clock):
        content = qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        clock.advance(days=1)
        result = validator.validate(db, content)
        assert result.valid is False
        assert result.expired is True
        assert result.error == ERR_EXPIRED

    def test_swept_code_reports_deactivated(self, db, qr_service, validator, clock):
        content = qr_service.generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        clock.advance(days=1)
        qr_service.cleanup_expired(db)
        assert validator.validate(db, content).error == ERR_DEACTIVATED
        assert db.query(QRCode).filter(QRCode.is_active.is_(True)).count() == 0


class TestUnsignableContent:
    # "\\ud800" is a JSON escape for a lone surrogate, which has no UTF-8 encoding
    def test_lone_surrogate_id_is_format_error(self, db, validator):
        raw = '{"type":"vehicle","id":"\\ud800","plate":"P-1","timestamp":1,"hash":"h","signature":"' + "0" * 64 + '"}'
        result = validator.validate(db, raw)
        assert result.valid is False
        assert result.expired is False
        assert result.error == ERR_FORMAT

    def test_lone_surrogate_in_unsigned_field_is_not_registered(self, db, qr_service, validator):
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, "veh-1", "P-1")
        smuggled = content[:-1] + ',"note":"\\udfff"}'
        result = validator.validate(db, smuggled)
        assert result.valid is False
        assert result.error == ERR_NOT_REGISTERED

    def test_raw_surrogate_character_is_rejected(self):
        assert parse_qr_content('{"type":"household","id":"\ud800","nationalId":"n","signature":"s"}') is None
