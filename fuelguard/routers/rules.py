# fuelguard/routers/rules.py
"""
Admin management of quota rules.
Fuel rules: one per (vehicle type, wilaya); wilaya "ALL" is the national default.
Gas rules: household-size bands; the narrowest band containing a household wins.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.errors import DomainError, NotFoundError
from fuelguard.models.quota_rule import FuelRule, GasBottleRule
from fuelguard.models.types import ALL_WILAYAS
from fuelguard.schemas.quota_rule import (
    FuelRuleCreate, FuelRuleUpdate, FuelRuleOut,
    GasBottleRuleCreate, GasBottleRuleUpdate, GasBottleRuleOut,
)
from fuelguard.services.audit_service import log_audit
from fuelguard.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


# ── Fuel ──────────────────────────────────────────────────────────────────────

@router.get("/rules/fuel", response_model=list[FuelRuleOut], summary="List fuel rules")
def list_fuel_rules(db: Session = Depends(get_db)):
    return db.query(FuelRule).order_by(FuelRule.vehicle_type, FuelRule.id).all()


@router.post("/rules/fuel", response_model=FuelRuleOut, summary="Create a fuel rule")
async def create_fuel_rule(body: FuelRuleCreate, db: Session = Depends(get_db)):
    wilaya = body.wilaya or ALL_WILAYAS
    existing = (
        db.query(FuelRule)
        .filter(FuelRule.vehicle_type == body.vehicle_type.value, FuelRule.wilaya == wilaya)
        .first()
    )
    if existing:
        raise DomainError(code="rule_exists", http_status=400,
                          message=f"A fuel rule for {body.vehicle_type.value} in {wilaya} already exists")

    rule = FuelRule(vehicle_type=body.vehicle_type.value, wilaya=wilaya,
                    max_fills_per_period=body.max_fills_per_period, period_hours=body.period_hours,
                    max_liters_per_fill=body.max_liters_per_fill, is_active=True)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info(f"[RULES] Fuel rule {rule.id} created: {rule.vehicle_type}/{rule.wilaya}")
    await log_audit(db, "CREATE_FUEL_RULE", "FuelRule", str(rule.id), details=body.model_dump(mode="json"))
    return rule


@router.put("/rules/fuel/{rule_id}", response_model=FuelRuleOut, summary="Update a fuel rule")
async def update_fuel_rule(rule_id: int, body: FuelRuleUpdate, db: Session = Depends(get_db)):
    rule = db.query(FuelRule).filter(FuelRule.id == rule_id).first()
    if not rule:
        raise NotFoundError("Fuel rule not found", code="rule_not_found")

    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(rule, field, value)
    db.commit()
    db.refresh(rule)
    logger.info(f"[RULES] Fuel rule {rule_id} updated: {changes}")
    await log_audit(db, "UPDATE_FUEL_RULE", "FuelRule", str(rule_id), details=changes)
    return rule


# ── Gas bottles ───────────────────────────────────────────────────────────────

@router.get("/rules/gas", response_model=list[GasBottleRuleOut], summary="List gas bottle rules")
def list_gas_rules(db: Session = Depends(get_db)):
    return db.query(GasBottleRule).order_by(GasBottleRule.min_member_count, GasBottleRule.id).all()


@router.post("/rules/gas", response_model=GasBottleRuleOut, summary="Create a gas bottle rule")
async def create_gas_rule(body: GasBottleRuleCreate, db: Session = Depends(get_db)):
    if body.max_member_count is not None and body.max_member_count < body.min_member_count:
        raise DomainError(code="invalid_band", http_status=400,
                          message="max_member_count must be >= min_member_count")

    rule = GasBottleRule(**body.model_dump(), is_active=True)
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info(f"[RULES] Gas rule {rule.id} created: {rule.name}")
    await log_audit(db, "CREATE_GAS_RULE", "GasBottleRule", str(rule.id), details=body.model_dump())
    return rule


@router.put("/rules/gas/{rule_id}", response_model=GasBottleRuleOut, summary="Update a gas bottle rule")
async def update_gas_rule(rule_id: int, body: GasBottleRuleUpdate, db: Session = Depends(get_db)):
    rule = db.query(GasBottleRule).filter(GasBottleRule.id == rule_id).first()
    if not rule:
        raise NotFoundError("Gas bottle rule not found", code="rule_not_found")

    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(rule, field, value)
    db.commit()
    db.refresh(rule)
    await log_audit(db, "UPDATE_GAS_RULE", "GasBottleRule", str(rule_id), details=changes)
    return rule
