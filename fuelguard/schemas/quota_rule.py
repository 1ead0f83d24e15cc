# fuelguard/schemas/quota_rule.py
from pydantic import BaseModel, Field
from typing import Optional
from fuelguard.models.types import VehicleType


class FuelRuleCreate(BaseModel):
    vehicle_type: VehicleType
    wilaya: Optional[str] = "ALL"      # "ALL" = national default
    max_fills_per_period: int = Field(ge=0)
    period_hours: int = Field(gt=0)
    max_liters_per_fill: float = Field(gt=0)


class FuelRuleUpdate(BaseModel):
    max_fills_per_period: Optional[int] = Field(default=None, ge=0)
    period_hours: Optional[int] = Field(default=None, gt=0)
    max_liters_per_fill: Optional[float] = Field(default=None, gt=0)
    is_active: Optional[bool] = None


class FuelRuleOut(BaseModel):
    id: int
    vehicle_type: str
    wilaya: Optional[str]
    max_fills_per_period: int
    period_hours: int
    max_liters_per_fill: float
    is_active: bool

    class Config:
        from_attributes = True


class GasBottleRuleCreate(BaseModel):
    name: str
    min_member_count: int = Field(ge=1)
    max_member_count: Optional[int] = None     # None = no upper bound
    max_bottles_per_period: int = Field(ge=0)
    period_days: int = Field(gt=0)
    bottle_size: int = 13


class GasBottleRuleUpdate(BaseModel):
    name: Optional[str] = None
    max_bottles_per_period: Optional[int] = Field(default=None, ge=0)
    period_days: Optional[int] = Field(default=None, gt=0)
    bottle_size: Optional[int] = None
    is_active: Optional[bool] = None


class GasBottleRuleOut(BaseModel):
    id: int
    name: str
    min_member_count: int
    max_member_count: Optional[int]
    max_bottles_per_period: int
    period_days: int
    bottle_size: int
    is_active: bool

    class Config:
        from_attributes = True
