# backend/routes/help_requests.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.enums import HelpRequestStatus, HelpRequestType, UserRole
from models.help_request import HelpRequest
from models.users import User
from schemas.common import Location, user_summary
from schemas.help_request import (
    ContactInfo, HelpRequestCreate, HelpRequestOut, HelpRequestsPage, HelpRequestUpdate
)
from schemas.workflow import AssignUpdate, NotesUpdate, StatusUpdate
from utils import events
from utils.assignment import apply_change
from utils.audit import client_ip, write_log
from utils.events import EventPublisher, get_publisher
from utils.tokenJWT import get_current_user, role_required
from utils.workflow import HELP_REQUEST_WORKFLOW

router = APIRouter(prefix="/api/help-requests", tags=["Help Requests"])

admin_required = role_required(UserRole.ADMIN.value)

# Statuses shown on the public board
OPEN_STATUSES = (
    HelpRequestStatus.PENDING.value,
    HelpRequestStatus.RECEIVED.value,
    HelpRequestStatus.IN_PROGRESS.value,
)

_CONTENT_FIELDS = {"type", "description", "location", "quantity", "unit", "contact_info"}


def _with_relations(query):
    return query.options(joinedload(HelpRequest.requested_by), joinedload(HelpRequest.assigned_to))

def _load(db: Session, request_id: int) -> HelpRequest:
    help_request = _with_relations(db.query(HelpRequest)).filter(HelpRequest.id == request_id).first()
    if not help_request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Help request not found")
    return help_request

def _to_out(hr: HelpRequest) -> HelpRequestOut:
    return HelpRequestOut(
        id=hr.id,
        type=hr.type,
        description=hr.description,
        location=Location(latitude=hr.latitude, longitude=hr.longitude, address=hr.address),
        quantity=hr.quantity,
        unit=hr.unit,
        status=hr.status,
        requested_by=user_summary(hr.requested_by),
        assigned_to=user_summary(hr.assigned_to),
        contact_info=ContactInfo(name=hr.contact_name, phone=hr.contact_phone, email=hr.contact_email),
        admin_notes=hr.admin_notes or "",
        created_at=hr.created_at,
        updated_at=hr.updated_at,
    )

async def _publish(db: Session, request_id: int, publisher: EventPublisher, event: str) -> HelpRequestOut:
    out = _to_out(_load(db, request_id))
    await publisher.publish(event, out.model_dump(mode="json", by_alias=True))
    return out

async def _save_and_broadcast(db: Session, request_id: int, publisher: EventPublisher, event: str) -> HelpRequestOut:
    db.commit()
    return await _publish(db, request_id, publisher, event)

async def broadcast_updates(db: Session, request_ids, publisher: EventPublisher) -> None:
    for request_id in request_ids:
        await _publish(db, request_id, publisher, events.HELP_REQUEST_UPDATED)

def _set_contact(hr: HelpRequest, contact: ContactInfo) -> None:
    hr.contact_name = contact.name
    hr.contact_phone = contact.phone
    hr.contact_email = str(contact.email) if contact.email else None


# Open requests, visible without logging in
@router.get("/public", response_model=List[HelpRequestOut])
def list_public_help_requests(
    type: Optional[HelpRequestType] = Query(None),
    db: Session = Depends(get_db),
):
    query = _with_relations(db.query(HelpRequest)).filter(HelpRequest.status.in_(OPEN_STATUSES))
    if type:
        query = query.filter(HelpRequest.type == type.value)
    rows = query.order_by(HelpRequest.created_at.desc(), HelpRequest.id.desc()).all()
    return [_to_out(r) for r in rows]


# Full list for the admin dashboard
@router.get("", response_model=HelpRequestsPage)
def list_help_requests(
    status_filter: Optional[List[HelpRequestStatus]] = Query(None, alias="status"),
    type: Optional[HelpRequestType] = Query(None),
    assigned_to: Optional[int] = Query(None, alias="assignedTo"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["createdAt", "updatedAt", "status", "type"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(HelpRequest)

    if status_filter:
        query = query.filter(HelpRequest.status.in_([s.value for s in status_filter]))
    if type:
        query = query.filter(HelpRequest.type == type.value)
    if assigned_to is not None:
        query = query.filter(HelpRequest.assigned_to_id == assigned_to)

    sort_map = {
        "createdAt": HelpRequest.created_at,
        "updatedAt": HelpRequest.updated_at,
        "status": HelpRequest.status,
        "type": HelpRequest.type,
    }
    col = sort_map[sort_by]
    query = query.order_by(col.asc() if order == "asc" else col.desc(), HelpRequest.id.desc())

    total = query.count()
    rows = _with_relations(query).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_to_out(r) for r in rows], "total": total, "page": page, "page_size": page_size}


# Requests made by or assigned to the caller
@router.get("/my", response_model=List[HelpRequestOut])
def my_help_requests(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    rows = (_with_relations(db.query(HelpRequest))
            .filter(or_(HelpRequest.requested_by_id == current_user.id,
                        HelpRequest.assigned_to_id == current_user.id))
            .order_by(HelpRequest.created_at.desc(), HelpRequest.id.desc())
            .all())
    return [_to_out(r) for r in rows]


@router.get("/{request_id}", response_model=HelpRequestOut)
def get_help_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    hr = _load(db, request_id)
    if not (current_user.is_admin
            or hr.requested_by_id == current_user.id
            or hr.assigned_to_id == current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this help request")
    return _to_out(hr)


@router.post("", response_model=HelpRequestOut, status_code=status.HTTP_201_CREATED)
async def create_help_request(
    payload: HelpRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = HelpRequest(
        type=payload.type.value,
        description=payload.description,
        latitude=payload.location.latitude,
        longitude=payload.location.longitude,
        address=payload.location.address,
        quantity=payload.quantity,
        unit=payload.unit,
        status=HELP_REQUEST_WORKFLOW.initial,
        requested_by_id=current_user.id,
        admin_notes="",
    )
    _set_contact(hr, payload.contact_info)
    db.add(hr)
    db.flush()
    return await _save_and_broadcast(db, hr.id, publisher, events.NEW_HELP_REQUEST)


@router.put("/{request_id}", response_model=HelpRequestOut)
async def update_help_request(
    request_id: int,
    payload: HelpRequestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = _load(db, request_id)
    fields = payload.model_fields_set
    is_requester = hr.requested_by_id == current_user.id
    is_assignee = hr.assigned_to_id == current_user.id

    if not (current_user.is_admin or is_requester or is_assignee):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this help request")
    if fields & _CONTENT_FIELDS and not (current_user.is_admin or is_requester):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the requester can edit this help request")
    if "admin_notes" in fields and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can edit admin notes")

    if not fields:
        return _to_out(hr)

    assign = "assigned_to" in fields
    if payload.status is not None or assign:
        apply_change(db, HELP_REQUEST_WORKFLOW, hr, current_user,
                     new_status=payload.status, assign=assign, assignee_id=payload.assigned_to)

    if payload.type is not None:
        hr.type = payload.type.value
    if payload.description is not None:
        hr.description = payload.description
    if payload.location is not None:
        hr.latitude = payload.location.latitude
        hr.longitude = payload.location.longitude
        hr.address = payload.location.address
    # quantity and unit may be cleared with an explicit null
    if "quantity" in fields:
        hr.quantity = payload.quantity
    if "unit" in fields:
        hr.unit = payload.unit
    if payload.contact_info is not None:
        _set_contact(hr, payload.contact_info)
    if payload.admin_notes is not None:
        hr.admin_notes = payload.admin_notes

    return await _save_and_broadcast(db, hr.id, publisher, events.HELP_REQUEST_UPDATED)


@router.put("/{request_id}/status", response_model=HelpRequestOut)
async def update_help_request_status(
    request_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = _load(db, request_id)
    apply_change(db, HELP_REQUEST_WORKFLOW, hr, current_user, new_status=payload.status)
    return await _save_and_broadcast(db, hr.id, publisher, events.HELP_REQUEST_UPDATED)


@router.put("/{request_id}/assign", response_model=HelpRequestOut)
async def assign_help_request(
    request_id: int,
    payload: AssignUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = _load(db, request_id)
    apply_change(db, HELP_REQUEST_WORKFLOW, hr, current_user, assign=True, assignee_id=payload.assigned_to)
    out = await _save_and_broadcast(db, hr.id, publisher, events.HELP_REQUEST_UPDATED)

    write_log(db, user_id=current_user.id, action="HELP_REQUEST_ASSIGN", resource="help_requests",
              resource_id=request_id, ip=client_ip(request),
              meta={"assigned_to": payload.assigned_to, "status": out.status})
    return out


@router.put("/{request_id}/notes", response_model=HelpRequestOut)
async def update_help_request_notes(
    request_id: int,
    payload: NotesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = _load(db, request_id)
    hr.admin_notes = payload.admin_notes
    return await _save_and_broadcast(db, hr.id, publisher, events.HELP_REQUEST_UPDATED)


@router.delete("/{request_id}")
async def delete_help_request(
    request_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    hr = db.query(HelpRequest).filter(HelpRequest.id == request_id).first()
    if not hr:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Help request not found")

    request_type, request_status = hr.type, hr.status
    db.delete(hr)
    db.commit()

    write_log(db, user_id=current_user.id, action="HELP_REQUEST_DELETE", resource="help_requests",
              resource_id=request_id, ip=client_ip(request),
              meta={"type": request_type, "status": request_status})
    await publisher.publish(events.HELP_REQUEST_DELETED, request_id)

    return {"message": "Help request deleted successfully.", "id": request_id}
