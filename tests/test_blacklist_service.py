# tests/test_blacklist_service.py
"""Blacklist lookup order, expiry, admin upsert and owner flags."""

import pytest
from datetime import datetime, timedelta
from conftest import NOW
from factories import make_blacklist, make_user
from fuelguard.errors import DomainError, NotFoundError
from fuelguard.models.blacklist import Blacklist
from fuelguard.models.types import BlacklistSeverity
from fuelguard.services import blacklist_service
from fuelguard.services.blacklist_service import check_blacklist


class TestCheckBlacklist:
    def test_no_identifiers_is_clean(self, db):
        assert check_blacklist(db).is_blacklisted is False

    def test_match_on_plate(self, db):
        make_blacklist(db, "Fraud", "BLOCKED", plate_number="P-1")
        result = check_blacklist(db, national_id="NID-X", plate_number="P-1", now=NOW)
        assert result.is_blocked
        assert result.reason == "Fraud"

    def test_blocked_plate_beats_warning_national_id(self, db):
        make_blacklist(db, "Plate entry", "BLOCKED", plate_number="P-1")
        make_blacklist(db, "Person entry", "WARNING", national_id="NID-1")
        result = check_blacklist(db, national_id="NID-1", plate_number="P-1", now=NOW)
        assert result.is_blocked
        assert result.reason == "Plate entry"

    def test_blocked_national_id_beats_warning_plate(self, db):
        make_blacklist(db, "Plate entry", "WARNING", plate_number="P-1")
        make_blacklist(db, "Person entry", "BLOCKED", national_id="NID-1")
        result = check_blacklist(db, national_id="NID-1", plate_number="P-1", now=NOW)
        assert result.is_blocked
        assert result.reason == "Person entry"

    def test_same_severity_newest_wins_across_identifiers(self, db):
        make_blacklist(db, "Person entry", "WARNING", national_id="NID-1", created_at=datetime(2025, 1, 1))
        make_blacklist(db, "Plate entry", "WARNING", plate_number="P-1", created_at=datetime(2025, 2, 1))
        result = check_blacklist(db, national_id="NID-1", plate_number="P-1", now=NOW)
        assert result.reason == "Plate entry"

    def test_older_blocked_beats_newer_warning_on_same_identifier(self, db):
        make_blacklist(db, "Blocked", "BLOCKED", national_id="NID-1", created_at=datetime(2025, 1, 1))
        make_blacklist(db, "Warned", "WARNING", national_id="NID-1", created_at=datetime(2025, 2, 1))
        assert check_blacklist(db, national_id="NID-1", now=NOW).is_blocked

    def test_expired_entry_ignored(self, db):
        make_blacklist(db, "Old", "BLOCKED", national_id="NID-1", expires_at=NOW - timedelta(seconds=1))
        assert check_blacklist(db, national_id="NID-1", now=NOW).is_blacklisted is False

    def test_future_expiry_still_applies(self, db):
        make_blacklist(db, "Temp", "WARNING", national_id="NID-1", expires_at=NOW + timedelta(days=1))
        assert check_blacklist(db, national_id="NID-1", now=NOW).is_warning

    def test_inactive_entry_ignored(self, db):
        make_blacklist(db, "Lifted", "BLOCKED", national_id="NID-1", active=False)
        assert check_blacklist(db, national_id="NID-1", now=NOW).is_blacklisted is False

    def test_most_recent_entry_wins(self, db):
        make_blacklist(db, "Older", "WARNING", national_id="NID-1", created_at=datetime(2025, 1, 1))
        make_blacklist(db, "Newer", "BLOCKED", national_id="NID-1", created_at=datetime(2025, 2, 1))
        assert check_blacklist(db, national_id="NID-1", now=NOW).reason == "Newer"


class TestAdministration:
    def test_add_requires_identifier(self, db):
        with pytest.raises(DomainError) as exc:
            blacklist_service.add_to_blacklist(db, "No id")
        assert exc.value.code == "missing_identifier"

    def test_add_updates_existing_active_entry(self, db):
        first = blacklist_service.add_to_blacklist(db, "First", national_id="NID-1")
        second = blacklist_service.add_to_blacklist(db, "Escalated", national_id="NID-1",
                                                    severity=BlacklistSeverity.BLOCKED)
        assert first.id == second.id
        assert second.severity == "BLOCKED"
        assert db.query(Blacklist).count() == 1

    def test_remove_deactivates(self, db):
        entry = blacklist_service.add_to_blacklist(db, "Fraud", plate_number="P-1")
        blacklist_service.remove_from_blacklist(db, entry.id)
        assert check_blacklist(db, plate_number="P-1").is_blacklisted is False
        assert db.query(Blacklist).count() == 1

    def test_remove_unknown_raises(self, db):
        with pytest.raises(NotFoundError):
            blacklist_service.remove_from_blacklist(db, "missing")

    def test_list_paginates_and_searches(self, db):
        for i in range(5):
            make_blacklist(db, f"Reason {i}", national_id=f"NID-{i}", created_at=datetime(2025, 1, i + 1))
        page = blacklist_service.list_blacklist(db, page=1, limit=2)
        assert page["pagination"] == {"page": 1, "limit": 2, "total": 5, "total_pages": 3}
        assert [e.national_id for e in page["entries"]] == ["NID-4", "NID-3"]

        found = blacklist_service.list_blacklist(db, search="NID-2")
        assert [e.national_id for e in found["entries"]] == ["NID-2"]

    def test_flag_and_unflag_user(self, db):
        user = make_user(db)
        blacklist_service.flag_user(db, user.id, "Suspicious volume")
        db.refresh(user)
        assert user.is_flagged and user.flag_reason == "Suspicious volume"

        blacklist_service.unflag_user(db, user.id)
        db.refresh(user)
        assert not user.is_flagged and user.flag_reason is None

    def test_flag_unknown_user_raises(self, db):
        with pytest.raises(NotFoundError):
            blacklist_service.flag_user(db, "nobody", "x")
