# fuelguard/routers/blacklist.py
"""Blacklist administration and the stand-alone check endpoint."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.errors import DomainError
from fuelguard.schemas.blacklist import BlacklistCreate, BlacklistOut
from fuelguard.services import blacklist_service
from fuelguard.services.audit_service import log_audit

router = APIRouter()


@router.post("/blacklist", response_model=BlacklistOut, summary="Add or update a blacklist entry")
async def add_entry(body: BlacklistCreate, db: Session = Depends(get_db)):
    entry = blacklist_service.add_to_blacklist(
        db, body.reason, national_id=body.national_id, plate_number=body.plate_number,
        severity=body.severity, notes=body.notes, added_by_id=body.added_by_id, expires_at=body.expires_at,
    )
    await log_audit(db, "ADD_BLACKLIST", "Blacklist", entry.id, user_id=body.added_by_id,
                    details={"severity": entry.severity, "reason": entry.reason})
    return entry


@router.get("/blacklist", summary="List blacklist entries")
def list_entries(search: Optional[str] = None, severity: Optional[str] = None, is_active: bool = True,
                 page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                 db: Session = Depends(get_db)):
    result = blacklist_service.list_blacklist(db, search, severity, is_active, page, limit)
    return {
        "entries": [BlacklistOut.model_validate(e) for e in result["entries"]],
        "pagination": result["pagination"],
    }


@router.get("/blacklist/check", summary="Check a national ID and/or plate")
def check(national_id: Optional[str] = None, plate_number: Optional[str] = None,
          db: Session = Depends(get_db)):
    if not national_id and not plate_number:
        raise DomainError(code="missing_identifier", http_status=400,
                          message="Either nationalId or plateNumber is required")
    result = blacklist_service.check_blacklist(db, national_id, plate_number)
    return {
        "is_blacklisted": result.is_blacklisted,
        "severity": result.severity.value if result.severity else None,
        "reason": result.reason,
    }


@router.delete("/blacklist/{entry_id}", summary="Deactivate a blacklist entry")
async def remove_entry(entry_id: str, db: Session = Depends(get_db)):
    entry = blacklist_service.remove_from_blacklist(db, entry_id)
    await log_audit(db, "REMOVE_BLACKLIST", "Blacklist", entry_id)
    return {"status": "removed", "id": entry.id}
