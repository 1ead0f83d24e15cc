# scripts/setup/seed_rules.py
"""
Seed the national default quota rules.
Existing rules are left untouched, so the script can be re-run safely.
Usage: python scripts/setup/seed_rules.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from fuelguard.database import SessionLocal, create_tables
from fuelguard.models.quota_rule import FuelRule, GasBottleRule
from fuelguard.models.types import ALL_WILAYAS

# vehicle_type: (max_fills_per_period, period_hours, max_liters_per_fill)
DEFAULT_FUEL_RULES = {
    "PRIVATE_CAR": (1, 72, 50),
    "TAXI":        (2, 24, 40),
    "TRUCK":       (1, 48, 200),
    "MOTORCYCLE":  (1, 72, 15),
    "BUS":         (1, 24, 150),
    "GOVERNMENT":  (999, 24, 999),
    "OTHER":       (1, 72, 50),
}

# name, min_member_count, max_member_count, max_bottles_per_period, period_days
DEFAULT_GAS_RULES = [
    ("Small household (1-2)", 1, 2, 1, 30),
    ("Medium household (3-5)", 3, 5, 2, 30),
    ("Large household (6+)", 6, None, 3, 30),
]


def main():
    create_tables()
    db = SessionLocal()
    try:
        for vehicle_type, (fills, hours, liters) in DEFAULT_FUEL_RULES.items():
            exists = db.query(FuelRule).filter(
                FuelRule.vehicle_type == vehicle_type, FuelRule.wilaya == ALL_WILAYAS
            ).first()
            if exists:
                print(f"   • fuel {vehicle_type}: already present")
                continue
            db.add(FuelRule(vehicle_type=vehicle_type, wilaya=ALL_WILAYAS, max_fills_per_period=fills,
                            period_hours=hours, max_liters_per_fill=liters, is_active=True))
            print(f"   ✓ fuel {vehicle_type}: {fills} fill(s) / {hours}h, {liters}L max")

        for name, min_members, max_members, bottles, days in DEFAULT_GAS_RULES:
            if db.query(GasBottleRule).filter(GasBottleRule.name == name).first():
                print(f"   • gas {name}: already present")
                continue
            db.add(GasBottleRule(name=name, min_member_count=min_members, max_member_count=max_members,
                                 max_bottles_per_period=bottles, period_days=days, bottle_size=13,
                                 is_active=True))
            print(f"   ✓ gas {name}: {bottles} bottle(s) / {days} days")

        db.commit()
    finally:
        db.close()
    print("\n🎉 Default rules seeded")


if __name__ == "__main__":
    main()
