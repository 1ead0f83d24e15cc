# tests/test_station_service.py
"""Station operator flows: scan dispatch, approve guards, atomic check-and-record."""

import pytest
from datetime import timedelta
from conftest import NOW
from factories import (
    make_blacklist, make_default_gas_rules, make_fill, make_fuel_rule, make_household, make_station,
    make_user, make_vehicle,
)
from fuelguard.errors import DomainError, NotFoundError, QuotaGuardError
from fuelguard.models.transaction import FuelTransaction, GasBottleTransaction
from fuelguard.models.types import QREntityType, TransactionStatus, ExchangeType
from fuelguard.services import station_service
from fuelguard.services.qr_service import QRCodeService
from fuelguard.services.qr_validator import QRValidator, ERR_FORMAT


@pytest.fixture
def qr_service(signer, clock):
    return QRCodeService(signer, clock=clock)


@pytest.fixture
def validator(signer, clock):
    return QRValidator(signer, clock=clock)


@pytest.fixture
def setup(db):
    owner = make_user(db)
    station = make_station(db, wilaya="Oran")
    vehicle = make_vehicle(db, owner, plate="P-1")
    household = make_household(db, owner, wilaya="Oran", members=4)
    make_fuel_rule(db, "PRIVATE_CAR", "ALL", fills=1, hours=72, liters=50)
    make_default_gas_rules(db)
    return owner, station, vehicle, household


class TestScan:
    def test_vehicle_code_dispatches_to_fuel(self, db, setup, qr_service, validator):
        _, station, vehicle, _ = setup
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, vehicle.id, vehicle.plate_number)
        outcome = station_service.scan_qr(db, content, validator, station.id, now=NOW)
        assert outcome.validation.valid
        assert outcome.fuel.eligible is True
        assert outcome.gas is None

    def test_household_code_dispatches_to_gas(self, db, setup, qr_service, validator):
        _, station, _, household = setup
        content = qr_service.get_or_generate(db, QREntityType.HOUSEHOLD, household.id, household.national_id)
        outcome = station_service.scan_qr(db, content, validator, station.id, now=NOW)
        assert outcome.gas.remaining_bottles == 2
        assert outcome.fuel is None

    def test_invalid_code_returns_validation_only(self, db, setup, validator):
        outcome = station_service.scan_qr(db, "{}", validator, now=NOW)
        assert outcome.validation.error == ERR_FORMAT
        assert outcome.fuel is None and outcome.gas is None

    def test_unknown_station_raises(self, db, setup, validator):
        with pytest.raises(NotFoundError):
            station_service.scan_qr(db, "{}", validator, "no-station", now=NOW)

    def test_gas_counter_rejects_vehicle_code(self, db, setup, qr_service, validator):
        _, station, vehicle, _ = setup
        content = qr_service.get_or_generate(db, QREntityType.VEHICLE, vehicle.id, vehicle.plate_number)
        with pytest.raises(DomainError) as exc:
            station_service.verify_household_qr(db, content, validator, station.id, now=NOW)
        assert exc.value.code == "wrong_qr_type"

    def test_manual_lookup(self, db, setup):
        _, station, _, _ = setup
        assert station_service.manual_lookup(db, "P-1", station.id, now=NOW).eligible is True
        with pytest.raises(NotFoundError):
            station_service.manual_lookup(db, "P-UNKNOWN", station.id, now=NOW)


class TestApproveFuel:
    def test_approve_records_and_consumes_quota(self, db, setup):
        _, station, vehicle, _ = setup
        txn = station_service.approve_fuel(db, vehicle.id, station.id, "op-1", 40, now=NOW)
        assert txn.status == "APPROVED"
        assert txn.warning_note is None

        with pytest.raises(QuotaGuardError) as exc:
            station_service.approve_fuel(db, vehicle.id, station.id, "op-1", 10, now=NOW + timedelta(hours=1))
        assert exc.value.code == "not_eligible"
        assert db.query(FuelTransaction).count() == 1

    def test_liters_ceiling(self, db, setup):
        _, station, vehicle, _ = setup
        with pytest.raises(QuotaGuardError) as exc:
            station_service.approve_fuel(db, vehicle.id, station.id, "op-1", 60, now=NOW)
        assert exc.value.code == "liters_exceeded"
        assert db.query(FuelTransaction).count() == 0

    def test_warning_is_tagged_on_transaction(self, db, setup):
        _, station, vehicle, _ = setup
        make_blacklist(db, "Watch list", "WARNING", plate_number="P-1")
        txn = station_service.approve_fuel(db, vehicle.id, station.id, "op-1", 20, now=NOW)
        assert txn.warning_note == "WARNING: Watch list"

    def test_not_eligible_carries_reason(self, db, setup):
        _, station, vehicle, _ = setup
        make_fill(db, vehicle, station, NOW - timedelta(hours=10))
        with pytest.raises(QuotaGuardError) as exc:
            station_service.approve_fuel(db, vehicle.id, station.id, "op-1", 20, now=NOW)
        assert exc.value.details["status"] == "DENIED"
        assert "62 hours" in exc.value.details["reason"]

    def test_deny_records_without_eligibility(self, db, setup):
        _, station, vehicle, _ = setup
        make_blacklist(db, "Blocked", "BLOCKED", plate_number="P-1")
        txn = station_service.deny_fuel(db, vehicle.id, station.id, "op-1", "Plate mismatch", now=NOW)
        assert txn.status == "DENIED"
        assert txn.denial_reason == "Plate mismatch"

    def test_deny_unknown_vehicle(self, db, setup):
        _, station, _, _ = setup
        with pytest.raises(NotFoundError):
            station_service.deny_fuel(db, "nope", station.id, "op-1", "x", now=NOW)


class TestRecordGas:
    def test_sale_within_remaining(self, db, setup):
        _, station, _, household = setup
        txn = station_service.record_gas(db, household.id, station.id, "op-1", TransactionStatus.APPROVED, 2,
                                         ExchangeType.EXCHANGE, now=NOW)
        assert txn.quantity == 2
        assert txn.exchange_type == "EXCHANGE"

    def test_quantity_over_remaining(self, db, setup):
        _, station, _, household = setup
        with pytest.raises(QuotaGuardError) as exc:
            station_service.record_gas(db, household.id, station.id, "op-1", "APPROVED", 3, now=NOW)
        assert exc.value.code == "bottles_exceeded"
        assert db.query(GasBottleTransaction).count() == 0

    def test_wrong_wilaya_station(self, db, setup):
        _, _, _, household = setup
        alger = make_station(db, code="ST-ALG-01", wilaya="Alger")
        with pytest.raises(QuotaGuardError) as exc:
            station_service.record_gas(db, household.id, alger.id, "op-1", "APPROVED", 1, now=NOW)
        assert "Alger" in exc.value.details["reason"]

    def test_denial_recorded_directly(self, db, setup):
        _, station, _, household = setup
        txn = station_service.record_gas(db, household.id, station.id, "op-1", "DENIED", 1,
                                         denial_reason="No empty bottle", now=NOW)
        assert txn.status == "DENIED"
        assert txn.denial_reason == "No empty bottle"
