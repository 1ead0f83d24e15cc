# fuelguard/services/quota_service.py
"""
Fuel and gas-bottle eligibility — the two QuotaPolicy instantiations of the
generic evaluator in eligibility_service.

Fuel: rule = station-wilaya rule for the vehicle type, else the national
default (wilaya "ALL" or NULL). Window in hours, counts fills.
Gas:  rule = narrowest household-size band (highest min_member_count).
Window in days, sums bottles. A household may only buy in its own wilaya.

A missing vehicle/household raises NotFoundError; ineligibility is a result.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from fuelguard.config import settings
from fuelguard.errors import NotFoundError
from fuelguard.models.household import Household
from fuelguard.models.quota_rule import FuelRule, GasBottleRule
from fuelguard.models.transaction import FuelTransaction, GasBottleTransaction
from fuelguard.models.types import ALL_WILAYAS
from fuelguard.models.vehicle import Vehicle
from fuelguard.services.blacklist_service import BlacklistCheckResult
from fuelguard.services.eligibility_service import (
    EligibilityDecision,
    EligibilityStatus,
    QuotaLimits,
    QuotaPolicy,
    evaluate,
)


# ── Fuel ──────────────────────────────────────────────────────────────────────

def fuel_rule_candidates(station_wilaya: Optional[str]) -> list:
    """Ordered (label, criterion) lookups: regional exception first, national default second."""
    candidates = []
    if station_wilaya:
        candidates.append(("station_wilaya", FuelRule.wilaya == station_wilaya))
    candidates.append(("national", or_(FuelRule.wilaya.is_(None), FuelRule.wilaya == ALL_WILAYAS)))
    return candidates


def resolve_fuel_rule(db: Session, vehicle_type: str, station_wilaya: Optional[str] = None) -> Optional[FuelRule]:
    for _label, criterion in fuel_rule_candidates(station_wilaya):
        rule = (
            db.query(FuelRule)
            .filter(FuelRule.vehicle_type == vehicle_type, FuelRule.is_active.is_(True), criterion)
            .order_by(FuelRule.id)
            .first()
        )
        if rule:
            return rule
    return None


def fuel_limits(rule: FuelRule, vehicle: Vehicle, apply_custom_limits: bool = False) -> QuotaLimits:
    max_fills = rule.max_fills_per_period
    period_hours = rule.period_hours
    max_liters = rule.max_liters_per_fill
    if apply_custom_limits:
        if vehicle.custom_max_fills_per_period is not None:
            max_fills = vehicle.custom_max_fills_per_period
        if vehicle.custom_period_hours is not None:
            period_hours = vehicle.custom_period_hours
        if vehicle.custom_max_liters_per_fill is not None:
            max_liters = vehicle.custom_max_liters_per_fill
    return QuotaLimits(max_per_period=max_fills, period=timedelta(hours=period_hours),
                       max_per_transaction=max_liters)


def fuel_policy(apply_custom_limits: bool = False) -> QuotaPolicy:
    return QuotaPolicy(
        name="fuel",
        transaction_model=FuelTransaction,
        entity_column="vehicle_id",
        time_unit=timedelta(hours=1),
        resolve_rule=lambda db, vehicle, wilaya: resolve_fuel_rule(db, vehicle.vehicle_type, wilaya),
        limits_for=lambda rule, vehicle: fuel_limits(rule, vehicle, apply_custom_limits),
        measure=len,
        identifiers=lambda vehicle: (vehicle.owner.national_id if vehicle.owner else None, vehicle.plate_number),
        inactive_reason="Vehicle is deactivated",
        unverified_reason="Vehicle is not verified - pending admin approval",
        no_rule_reason="No active fuel rule found for this vehicle type",
        quota_reason="Quota exceeded: {consumed}/{maximum} fills used. Next fill allowed in {until} hours",
    )


@dataclass
class FuelEligibilityResult:
    status: EligibilityStatus
    eligible: bool
    vehicle: Vehicle
    rule: Optional[FuelRule] = None
    reason: Optional[str] = None
    fills_in_period: int = 0
    max_fills_allowed: int = 0
    max_liters_allowed: float = 0
    period_hours: Optional[int] = None
    next_eligible_at: Optional[datetime] = None
    hours_until_next_fill: Optional[int] = None
    last_fill_date: Optional[datetime] = None
    last_fill_liters: Optional[float] = None
    blacklist_info: Optional[BlacklistCheckResult] = None

    @classmethod
    def from_decision(cls, vehicle: Vehicle, decision: EligibilityDecision) -> "FuelEligibilityResult":
        limits = decision.limits
        latest = decision.usage.latest
        return cls(
            status=decision.status,
            eligible=decision.eligible,
            vehicle=vehicle,
            rule=decision.rule,
            reason=decision.reason,
            fills_in_period=int(decision.usage.consumed),
            max_fills_allowed=limits.max_per_period if limits else 0,
            max_liters_allowed=limits.max_per_transaction if limits else 0,
            period_hours=int(limits.period / timedelta(hours=1)) if limits else None,
            next_eligible_at=decision.next_eligible_at,
            hours_until_next_fill=decision.time_until_next,
            last_fill_date=latest.created_at if latest else None,
            last_fill_liters=latest.liters if latest else None,
            blacklist_info=decision.blacklist,
        )


def check_fuel_eligibility(db: Session, vehicle_id: str, station_wilaya: Optional[str] = None,
                           now: Optional[datetime] = None,
                           apply_custom_limits: Optional[bool] = None) -> FuelEligibilityResult:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFoundError("Vehicle not found", code="vehicle_not_found")

    if apply_custom_limits is None:
        apply_custom_limits = settings.APPLY_CUSTOM_VEHICLE_LIMITS

    decision = evaluate(db, fuel_policy(apply_custom_limits), vehicle, station_wilaya, now)
    return FuelEligibilityResult.from_decision(vehicle, decision)


# ── Gas bottles ───────────────────────────────────────────────────────────────

def resolve_gas_rule(db: Session, member_count: int) -> Optional[GasBottleRule]:
    """Narrowest band containing member_count: highest min_member_count, ties by id."""
    return (
        db.query(GasBottleRule)
        .filter(
            GasBottleRule.is_active.is_(True),
            GasBottleRule.min_member_count <= member_count,
            or_(GasBottleRule.max_member_count.is_(None), GasBottleRule.max_member_count >= member_count),
        )
        .order_by(GasBottleRule.min_member_count.desc(), GasBottleRule.id)
        .first()
    )


def gas_limits(rule: GasBottleRule, household: Household) -> QuotaLimits:
    return QuotaLimits(max_per_period=rule.max_bottles_per_period, period=timedelta(days=rule.period_days))


def registered_wilaya_restriction(household: Household, station_wilaya: Optional[str]) -> Optional[str]:
    if station_wilaya and household.wilaya != station_wilaya:
        return (f"Household is registered in {household.wilaya}, not {station_wilaya}. "
                f"Gas bottles must be purchased in your registered wilaya.")
    return None


GAS_POLICY = QuotaPolicy(
    name="gas",
    transaction_model=GasBottleTransaction,
    entity_column="household_id",
    time_unit=timedelta(days=1),
    resolve_rule=lambda db, household, wilaya: resolve_gas_rule(db, household.member_count),
    limits_for=gas_limits,
    measure=lambda transactions: sum(t.quantity for t in transactions),
    identifiers=lambda household: (household.national_id, None),
    inactive_reason="Household registration is deactivated",
    unverified_reason="Household is not verified - pending admin approval",
    no_rule_reason="No active gas bottle rule found for this household size",
    quota_reason="Quota exceeded: {consumed}/{maximum} bottles used. Next purchase allowed in {until} days",
    location_restriction=registered_wilaya_restriction,
)


@dataclass
class GasEligibilityResult:
    status: EligibilityStatus
    eligible: bool
    household: Household
    rule: Optional[GasBottleRule] = None
    reason: Optional[str] = None
    bottles_in_period: int = 0
    max_bottles_allowed: int = 0
    period_days: Optional[int] = None
    next_eligible_at: Optional[datetime] = None
    days_until_next_purchase: Optional[int] = None
    last_purchase_date: Optional[datetime] = None
    blacklist_info: Optional[BlacklistCheckResult] = None

    @property
    def remaining_bottles(self) -> int:
        return max(0, self.max_bottles_allowed - self.bottles_in_period)

    @classmethod
    def from_decision(cls, household: Household, decision: EligibilityDecision) -> "GasEligibilityResult":
        limits = decision.limits
        latest = decision.usage.latest
        return cls(
            status=decision.status,
            eligible=decision.eligible,
            household=household,
            rule=decision.rule,
            reason=decision.reason,
            bottles_in_period=int(decision.usage.consumed),
            max_bottles_allowed=limits.max_per_period if limits else 0,
            period_days=limits.period.days if limits else None,
            next_eligible_at=decision.next_eligible_at,
            days_until_next_purchase=decision.time_until_next,
            last_purchase_date=latest.created_at if latest else None,
            blacklist_info=decision.blacklist,
        )


def check_gas_eligibility(db: Session, household_id: str, station_wilaya: Optional[str] = None,
                          now: Optional[datetime] = None) -> GasEligibilityResult:
    household = db.query(Household).filter(Household.id == household_id).first()
    if not household:
        raise NotFoundError("Household not found", code="household_not_found")

    decision = evaluate(db, GAS_POLICY, household, station_wilaya, now)
    return GasEligibilityResult.from_decision(household, decision)
