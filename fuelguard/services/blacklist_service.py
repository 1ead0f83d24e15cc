# fuelguard/services/blacklist_service.py
"""
Blacklist lookup and administration, plus owner flagging.

Lookups try an explicit, ordered list of identifier strategies (national ID,
then plate number). Every strategy is consulted; among the active, unexpired
matches a BLOCKED entry wins over a WARNING one, then the newest wins.
  - BLOCKED : hard denial, overrides every other eligibility check
  - WARNING : still eligible, operator sees a warning and the transaction is tagged
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from fuelguard.errors import DomainError, NotFoundError
from fuelguard.models.blacklist import Blacklist
from fuelguard.models.types import BlacklistSeverity
from fuelguard.models.user import User
from fuelguard.utils.clock import local_now
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BlacklistCheckResult:
    is_blacklisted: bool
    severity: Optional[BlacklistSeverity] = None
    reason: Optional[str] = None
    entry: Optional[Blacklist] = None

    @property
    def is_blocked(self) -> bool:
        return self.is_blacklisted and self.severity == BlacklistSeverity.BLOCKED

    @property
    def is_warning(self) -> bool:
        return self.is_blacklisted and self.severity == BlacklistSeverity.WARNING


def lookup_strategies(national_id: Optional[str], plate_number: Optional[str]) -> list:
    """Ordered (label, criterion) pairs for the identifiers that were supplied."""
    strategies = []
    if national_id:
        strategies.append(("national_id", Blacklist.national_id == national_id))
    if plate_number:
        strategies.append(("plate_number", Blacklist.plate_number == plate_number))
    return strategies


def check_blacklist(db: Session, national_id: Optional[str] = None, plate_number: Optional[str] = None,
                    now: Optional[datetime] = None) -> BlacklistCheckResult:
    """
    Collect the newest live entry from every strategy, then pick the strongest:
    BLOCKED beats WARNING whichever identifier it was found on, ties go to the newest.
    """
    strategies = lookup_strategies(national_id, plate_number)
    if not strategies:
        return BlacklistCheckResult(is_blacklisted=False)

    now = now or local_now()
    matches = []
    for label, criterion in strategies:
        entry = (
            db.query(Blacklist)
            .filter(
                Blacklist.is_active.is_(True),
                criterion,
                or_(Blacklist.expires_at.is_(None), Blacklist.expires_at > now),
            )
            .order_by(
                (Blacklist.severity == BlacklistSeverity.BLOCKED.value).desc(),
                Blacklist.created_at.desc(),
            )
            .first()
        )
        if entry:
            matches.append((label, entry))

    if not matches:
        return BlacklistCheckResult(is_blacklisted=False)

    matches.sort(key=lambda m: m[1].created_at or datetime.min, reverse=True)
    matches.sort(key=lambda m: _severity_rank(m[1]))
    label, entry = matches[0]
    logger.warning(f"[BLACKLIST] Match on {label}: severity={entry.severity} reason={entry.reason}")
    return BlacklistCheckResult(
        is_blacklisted=True,
        severity=BlacklistSeverity(entry.severity),
        reason=entry.reason,
        entry=entry,
    )


def _severity_rank(entry: Blacklist) -> int:
    return 0 if entry.severity == BlacklistSeverity.BLOCKED.value else 1


def add_to_blacklist(db: Session, reason: str, national_id: Optional[str] = None,
                     plate_number: Optional[str] = None,
                     severity: BlacklistSeverity = BlacklistSeverity.WARNING,
                     notes: Optional[str] = None, added_by_id: Optional[str] = None,
                     expires_at: Optional[datetime] = None) -> Blacklist:
    """Create an entry, or update the active one already covering either identifier."""
    strategies = lookup_strategies(national_id, plate_number)
    if not strategies:
        raise DomainError(code="missing_identifier", http_status=400,
                          message="Either nationalId or plateNumber is required")

    existing = (
        db.query(Blacklist)
        .filter(Blacklist.is_active.is_(True), or_(*[criterion for _, criterion in strategies]))
        .first()
    )
    if existing:
        existing.reason = reason
        existing.severity = BlacklistSeverity(severity).value
        existing.notes = notes
        existing.expires_at = expires_at
        entry = existing
        logger.info(f"[BLACKLIST] Updated entry {existing.id} severity={existing.severity}")
    else:
        entry = Blacklist(
            national_id=national_id,
            plate_number=plate_number,
            reason=reason,
            severity=BlacklistSeverity(severity).value,
            notes=notes,
            added_by_id=added_by_id,
            expires_at=expires_at,
            is_active=True,
            created_at=local_now(),
        )
        db.add(entry)
        logger.info(f"[BLACKLIST] Added {national_id or plate_number} severity={entry.severity}")

    db.commit()
    db.refresh(entry)
    return entry


def remove_from_blacklist(db: Session, entry_id: str) -> Blacklist:
    entry = db.query(Blacklist).filter(Blacklist.id == entry_id).first()
    if not entry:
        raise NotFoundError("Blacklist entry not found")
    entry.is_active = False
    db.commit()
    logger.info(f"[BLACKLIST] Deactivated entry {entry_id}")
    return entry


def list_blacklist(db: Session, search: Optional[str] = None, severity: Optional[str] = None,
                   is_active: bool = True, page: int = 1, limit: int = 20) -> dict:
    q = db.query(Blacklist).filter(Blacklist.is_active.is_(is_active))
    if severity:
        q = q.filter(Blacklist.severity == severity)
    if search:
        pattern = f"%{search}%"
        q = q.filter(or_(
            Blacklist.national_id.ilike(pattern),
            Blacklist.plate_number.ilike(pattern),
            Blacklist.reason.ilike(pattern),
        ))

    total = q.count()
    entries = q.order_by(Blacklist.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return {
        "entries": entries,
        "pagination": {"page": page, "limit": limit, "total": total,
                       "total_pages": math.ceil(total / limit) if limit else 0},
    }


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def flag_user(db: Session, user_id: str, reason: str) -> User:
    user = _get_user(db, user_id)
    user.is_flagged = True
    user.flag_reason = reason
    db.commit()
    logger.warning(f"[FLAG] User {user_id} flagged: {reason}")
    return user


def unflag_user(db: Session, user_id: str) -> User:
    user = _get_user(db, user_id)
    user.is_flagged = False
    user.flag_reason = None
    db.commit()
    logger.info(f"[FLAG] User {user_id} unflagged")
    return user
