# fuelguard/routers/stations.py
"""Stations and their daily transaction log."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.errors import DomainError
from fuelguard.models.station import Station
from fuelguard.schemas.station import StationCreate, StationOut
from fuelguard.schemas.transaction import FuelTransactionOut, GasBottleTransactionOut
from fuelguard.services.audit_service import log_audit
from fuelguard.services.station_service import get_station
from fuelguard.services.transaction_service import list_station_transactions

router = APIRouter()


@router.post("/stations", response_model=StationOut, summary="Create a station")
async def create_station(body: StationCreate, db: Session = Depends(get_db)):
    if db.query(Station).filter(Station.code == body.code).first():
        raise DomainError(code="station_code_taken", http_status=400,
                          message=f"Station code {body.code} already exists")
    station = Station(**body.model_dump(), is_active=True)
    db.add(station)
    db.commit()
    db.refresh(station)
    await log_audit(db, "CREATE_STATION", "Station", station.id, details={"wilaya": station.wilaya})
    return station


@router.get("/stations/{station_id}/transactions", summary="Station transactions for one day")
def station_transactions(station_id: str, day: Optional[date] = None, status: Optional[str] = None,
                         limit: int = Query(50, ge=1, le=500), db: Session = Depends(get_db)):
    """Fuel and gas transactions recorded at the station, newest first. Defaults to today."""
    get_station(db, station_id)
    result = list_station_transactions(db, station_id, day, status, limit)
    return {
        "date": result["date"],
        "fuel": [FuelTransactionOut.model_validate(t) for t in result["fuel"]],
        "gas": [GasBottleTransactionOut.model_validate(t) for t in result["gas"]],
    }
