# backend/routes/volunteers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from database import get_db
from models.enums import UserRole, VolunteerSkill
from models.users import User
from models.volunteer import Volunteer
from schemas.volunteer import (
    VolunteerContact, VolunteerCreate, VolunteerLocation, VolunteerOut, VolunteerUpdate
)
from utils.audit import client_ip, write_log
from utils.tokenJWT import role_required

# Informational directory; sign-up and browsing are open, edits are admin-only
router = APIRouter(prefix="/api/volunteers", tags=["Volunteers"])

admin_required = role_required(UserRole.ADMIN.value)


def _to_out(v: Volunteer) -> VolunteerOut:
    location = None
    if v.latitude is not None or v.longitude is not None or v.address:
        location = VolunteerLocation(latitude=v.latitude, longitude=v.longitude, address=v.address)
    return VolunteerOut(
        id=v.id,
        name=v.name,
        contact_info=VolunteerContact(email=v.email, phone=v.phone),
        skills=list(v.skills or []),
        availability=v.availability,
        location=location,
        registered_at=v.registered_at,
    )

def _get_or_404(db: Session, volunteer_id: int) -> Volunteer:
    v = db.query(Volunteer).filter(Volunteer.id == volunteer_id).first()
    if not v:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Volunteer not found.")
    return v

def _ensure_email_free(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Volunteer).filter(func.lower(Volunteer.email) == email.lower())
    if exclude_id is not None:
        query = query.filter(Volunteer.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered as a volunteer.")

def _set_location(v: Volunteer, location: Optional[VolunteerLocation]) -> None:
    v.latitude = location.latitude if location else None
    v.longitude = location.longitude if location else None
    v.address = location.address if location else None


@router.get("", response_model=List[VolunteerOut])
def list_volunteers(
    skill: Optional[VolunteerSkill] = Query(None),
    q: Optional[str] = Query(None, description="Search by name"),
    db: Session = Depends(get_db),
):
    query = db.query(Volunteer)
    if q:
        query = query.filter(Volunteer.name.ilike(f"%{q}%"))
    rows = query.order_by(Volunteer.registered_at.desc(), Volunteer.id.desc()).all()
    # Skills live in a JSON column, so filter them in Python
    if skill:
        rows = [v for v in rows if skill.value in (v.skills or [])]
    return [_to_out(v) for v in rows]


@router.get("/{volunteer_id}", response_model=VolunteerOut)
def get_volunteer(volunteer_id: int, db: Session = Depends(get_db)):
    return _to_out(_get_or_404(db, volunteer_id))


@router.post("", response_model=VolunteerOut, status_code=status.HTTP_201_CREATED)
def register_volunteer(payload: VolunteerCreate, db: Session = Depends(get_db)):
    email = str(payload.contact_info.email).strip().lower()
    _ensure_email_free(db, email)

    v = Volunteer(
        name=payload.name,
        email=email,
        phone=payload.contact_info.phone,
        skills=[s.value for s in payload.skills],
        availability=payload.availability,
    )
    _set_location(v, payload.location)
    db.add(v)
    db.commit()
    db.refresh(v)
    return _to_out(v)


@router.put("/{volunteer_id}", response_model=VolunteerOut)
def update_volunteer(
    volunteer_id: int,
    payload: VolunteerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    v = _get_or_404(db, volunteer_id)

    if payload.name is not None:
        v.name = payload.name
    if payload.contact_info is not None:
        email = str(payload.contact_info.email).strip().lower()
        _ensure_email_free(db, email, exclude_id=v.id)
        v.email = email
        v.phone = payload.contact_info.phone
    if payload.skills is not None:
        v.skills = [s.value for s in payload.skills]
    if payload.availability is not None:
        v.availability = payload.availability
    if "location" in payload.model_fields_set:
        _set_location(v, payload.location)

    db.commit()
    db.refresh(v)
    return _to_out(v)


@router.delete("/{volunteer_id}")
def delete_volunteer(
    volunteer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    v = _get_or_404(db, volunteer_id)
    email = v.email
    db.delete(v)
    db.commit()

    write_log(db, user_id=current_user.id, action="VOLUNTEER_DELETE", resource="volunteers",
              resource_id=volunteer_id, ip=client_ip(request), meta={"email": email})

    return {"message": "Volunteer deleted successfully.", "id": volunteer_id}
