# fuelguard/services/transaction_service.py
"""
Append-only transaction recorder.
No eligibility logic here: callers decide, this module only writes what they decided.
Rows are never updated or deleted.
"""

from datetime import datetime, date, time
from typing import Optional

from sqlalchemy.orm import Session

from fuelguard.models.transaction import FuelTransaction, GasBottleTransaction
from fuelguard.models.types import TransactionStatus, ExchangeType
from fuelguard.utils.clock import local_now
from fuelguard.utils.logger import get_logger

logger = get_logger(__name__)


def record_fuel_transaction(db: Session, vehicle_id: str, station_id: str, processed_by_id: str,
                            status: TransactionStatus, liters: Optional[float] = None,
                            denial_reason: Optional[str] = None, warning_note: Optional[str] = None,
                            now: Optional[datetime] = None, commit: bool = True) -> FuelTransaction:
    now = now or local_now()
    status = TransactionStatus(status)
    transaction = FuelTransaction(
        vehicle_id=vehicle_id,
        station_id=station_id,
        processed_by_id=processed_by_id,
        status=status.value,
        liters=liters,
        denial_reason=denial_reason,
        warning_note=warning_note,
        created_at=now,
        completed_at=now if status == TransactionStatus.APPROVED else None,
    )
    db.add(transaction)
    if commit:
        db.commit()
        db.refresh(transaction)
    logger.info(f"[FUEL] {status.value} vehicle={vehicle_id} station={station_id} liters={liters}")
    return transaction


def record_gas_bottle_transaction(db: Session, household_id: str, station_id: str, processed_by_id: str,
                                  status: TransactionStatus, quantity: int,
                                  exchange_type: ExchangeType = ExchangeType.NEW,
                                  denial_reason: Optional[str] = None, warning_note: Optional[str] = None,
                                  now: Optional[datetime] = None, commit: bool = True) -> GasBottleTransaction:
    status = TransactionStatus(status)
    transaction = GasBottleTransaction(
        household_id=household_id,
        station_id=station_id,
        processed_by_id=processed_by_id,
        status=status.value,
        quantity=quantity,
        exchange_type=ExchangeType(exchange_type).value,
        denial_reason=denial_reason,
        warning_note=warning_note,
        created_at=now or local_now(),
    )
    db.add(transaction)
    if commit:
        db.commit()
        db.refresh(transaction)
    logger.info(f"[GAS] {status.value} household={household_id} station={station_id} qty={quantity}")
    return transaction


def get_last_fill_info(db: Session, vehicle_id: str) -> Optional[FuelTransaction]:
    return (
        db.query(FuelTransaction)
        .filter(FuelTransaction.vehicle_id == vehicle_id,
                FuelTransaction.status == TransactionStatus.APPROVED.value)
        .order_by(FuelTransaction.created_at.desc())
        .first()
    )


def get_last_gas_purchase(db: Session, household_id: str) -> Optional[GasBottleTransaction]:
    return (
        db.query(GasBottleTransaction)
        .filter(GasBottleTransaction.household_id == household_id,
                GasBottleTransaction.status == TransactionStatus.APPROVED.value)
        .order_by(GasBottleTransaction.created_at.desc())
        .first()
    )


def list_station_transactions(db: Session, station_id: str, day: Optional[date] = None,
                              status: Optional[str] = None, limit: int = 50) -> dict:
    """A station's fuel and gas transactions for one day (today by default), newest first."""
    day = day or local_now().date()
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time.max)

    fuel_q = db.query(FuelTransaction).filter(
        FuelTransaction.station_id == station_id,
        FuelTransaction.created_at >= start,
        FuelTransaction.created_at <= end,
    )
    gas_q = db.query(GasBottleTransaction).filter(
        GasBottleTransaction.station_id == station_id,
        GasBottleTransaction.created_at >= start,
        GasBottleTransaction.created_at <= end,
    )
    if status:
        fuel_q = fuel_q.filter(FuelTransaction.status == status)
        gas_q = gas_q.filter(GasBottleTransaction.status == status)

    return {
        "date": str(day),
        "fuel": fuel_q.order_by(FuelTransaction.created_at.desc()).limit(limit).all(),
        "gas": gas_q.order_by(GasBottleTransaction.created_at.desc()).limit(limit).all(),
    }
