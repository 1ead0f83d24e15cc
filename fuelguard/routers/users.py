# fuelguard/routers/users.py
"""Citizen / operator accounts and the owner flag used by eligibility."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from fuelguard.database import get_db
from fuelguard.errors import NotFoundError
from fuelguard.models.user import User
from fuelguard.schemas.blacklist import FlagRequest
from fuelguard.schemas.user import UserCreate, UserOut
from fuelguard.services.audit_service import log_audit
from fuelguard.services.blacklist_service import flag_user, unflag_user

router = APIRouter()


@router.post("/users", response_model=UserOut, summary="Create a user")
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    user = User(full_name=body.full_name, national_id=body.national_id, phone=body.phone,
                role=body.role.value, is_flagged=False, is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/users/{user_id}", response_model=UserOut, summary="Get a user")
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found", code="user_not_found")
    return user


@router.put("/users/{user_id}/flag", response_model=UserOut, summary="Flag a user (eligibility warning)")
async def flag(user_id: str, body: FlagRequest, db: Session = Depends(get_db)):
    user = flag_user(db, user_id, body.reason)
    await log_audit(db, "FLAG_USER", "User", user_id, details={"reason": body.reason})
    return user


@router.delete("/users/{user_id}/flag", response_model=UserOut, summary="Remove a user flag")
async def unflag(user_id: str, db: Session = Depends(get_db)):
    user = unflag_user(db, user_id)
    await log_audit(db, "UNFLAG_USER", "User", user_id)
    return user
