# fuelguard/services/eligibility_service.py
"""
Generic quota eligibility evaluator.

Fuel and gas-bottle eligibility walk the same decision tree; everything that
differs between them (rule resolution, window unit, count vs. sum, the gas
wilaya hard-stop, reason wording) is supplied by a QuotaPolicy.

    BLOCKED blacklist?            → DENIED
    entity inactive?              → DENIED
    entity unverified?            → DENIED
    location restriction?         → DENIED   (gas only)
    no applicable rule?           → DENIED
    consumption in window >= max? → DENIED   (+ next_eligible_at)
    WARNING blacklist / flagged?  → WARNING  (eligible)
    otherwise                     → APPROVED

Evaluation never writes. Recording the outcome is the caller's job.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from sqlalchemy.orm import Session

from fuelguard.models.types import TransactionStatus
from fuelguard.services.blacklist_service import BlacklistCheckResult, check_blacklist
from fuelguard.utils.clock import local_now, ceil_units
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


class EligibilityStatus(str, enum.Enum):
    APPROVED = "APPROVED"
    DENIED = "DENIED"
    WARNING = "WARNING"


@dataclass(frozen=True)
class QuotaLimits:
    max_per_period: int
    period: timedelta
    max_per_transaction: Optional[float] = None


@dataclass
class WindowUsage:
    consumed: float
    transactions: list = field(default_factory=list)   # newest first

    @property
    def latest(self):
        return self.transactions[0] if self.transactions else None

    @property
    def oldest(self):
        return self.transactions[-1] if self.transactions else None


@dataclass
class EligibilityDecision:
    status: EligibilityStatus
    eligible: bool
    reason: Optional[str] = None
    rule: Any = None
    limits: Optional[QuotaLimits] = None
    usage: WindowUsage = field(default_factory=lambda: WindowUsage(consumed=0))
    next_eligible_at: Optional[datetime] = None
    time_until_next: Optional[int] = None
    blacklist: Optional[BlacklistCheckResult] = None


@dataclass(frozen=True)
class QuotaPolicy:
    name: str
    transaction_model: type
    entity_column: str
    time_unit: timedelta
    resolve_rule: Callable[[Session, Any, Optional[str]], Any]
    limits_for: Callable[[Any, Any], QuotaLimits]
    measure: Callable[[list], float]
    identifiers: Callable[[Any], tuple]
    inactive_reason: str
    unverified_reason: str
    no_rule_reason: str
    quota_reason: str   # formatted with consumed, maximum, until
    location_restriction: Optional[Callable[[Any, Optional[str]], Optional[str]]] = None


def consumption_in_window(db: Session, policy: QuotaPolicy, entity_id: str, period: timedelta,
                          now: datetime) -> WindowUsage:
    """
    APPROVED transactions in (now - period, now], newest first.
    A transaction exactly one period old has already aged out; one dated after now is not counted yet.
    """
    model = policy.transaction_model
    transactions = (
        db.query(model)
        .filter(
            getattr(model, policy.entity_column) == entity_id,
            model.status == TransactionStatus.APPROVED.value,
            model.created_at > now - period,
            model.created_at <= now,
        )
        .order_by(model.created_at.desc())
        .all()
    )
    return WindowUsage(consumed=policy.measure(transactions), transactions=transactions)


def _denied(policy: QuotaPolicy, entity, reason: str, **kwargs) -> EligibilityDecision:
    logger.info(f"[{policy.name.upper()}] DENIED {entity.id}: {reason}")
    return EligibilityDecision(status=EligibilityStatus.DENIED, eligible=False, reason=reason, **kwargs)


def evaluate(db: Session, policy: QuotaPolicy, entity, station_wilaya: Optional[str] = None,
             now: Optional[datetime] = None) -> EligibilityDecision:
    now = now or local_now()

    national_id, plate_number = policy.identifiers(entity)
    blacklist = check_blacklist(db, national_id, plate_number, now=now)
    if blacklist.is_blocked:
        return _denied(policy, entity, f"BLOCKED: {blacklist.reason}", blacklist=blacklist)

    if not entity.is_active:
        return _denied(policy, entity, policy.inactive_reason)

    if not entity.is_verified:
        return _denied(policy, entity, policy.unverified_reason)

    if policy.location_restriction:
        restriction = policy.location_restriction(entity, station_wilaya)
        if restriction:
            return _denied(policy, entity, restriction)

    rule = policy.resolve_rule(db, entity, station_wilaya)
    if rule is None:
        return _denied(policy, entity, policy.no_rule_reason)

    limits = policy.limits_for(rule, entity)
    usage = consumption_in_window(db, policy, entity.id, limits.period, now)

    if usage.consumed >= limits.max_per_period:
        # Next slot opens when the oldest in-window transaction ages out
        oldest = usage.oldest
        next_eligible_at = oldest.created_at + limits.period if oldest else now
        until = ceil_units(next_eligible_at - now, policy.time_unit)
        reason = policy.quota_reason.format(consumed=_fmt(usage.consumed), maximum=limits.max_per_period,
                                            until=until)
        return _denied(policy, entity, reason, rule=rule, limits=limits, usage=usage,
                       next_eligible_at=next_eligible_at, time_until_next=until)

    owner = getattr(entity, "owner", None)
    flagged = bool(owner and owner.is_flagged)
    if blacklist.is_warning or flagged:
        detail = blacklist.reason or (owner.flag_reason if owner else None) or "Account flagged for review"
        logger.warning(f"[{policy.name.upper()}] WARNING {entity.id}: {detail}")
        return EligibilityDecision(
            status=EligibilityStatus.WARNING,
            eligible=True,
            reason=f"WARNING: {detail}",
            rule=rule,
            limits=limits,
            usage=usage,
            blacklist=blacklist,
        )

    return EligibilityDecision(status=EligibilityStatus.APPROVED, eligible=True, rule=rule,
                               limits=limits, usage=usage)


def _fmt(value: float):
    return int(value) if float(value).is_integer() else value
