# backend/routes/reports.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import case, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from database import get_db
from models.enums import ReportStatus, ReportType, Severity, UserRole
from models.report import Report, ReportComment
from models.users import User
from schemas.common import Location, user_summary
from schemas.report import CommentCreate, CommentOut, ReportCreate, ReportOut, ReportsPage, ReportUpdate
from schemas.workflow import AssignUpdate, NotesUpdate, StatusUpdate
from utils import events
from utils.assignment import apply_change
from utils.audit import client_ip, write_log
from utils.events import EventPublisher, get_publisher
from utils.tokenJWT import get_current_user, role_required
from utils.workflow import REPORT_WORKFLOW

router = APIRouter(prefix="/api/reports", tags=["Reports"])

admin_required = role_required(UserRole.ADMIN.value)

# Severity sorts by urgency, not alphabetically
_SEVERITY_RANK = case({s.value: i for i, s in enumerate(Severity)}, value=Report.severity, else_=-1)

_CONTENT_FIELDS = {"type", "description", "location", "severity", "images"}


def _with_relations(query):
    return query.options(
        joinedload(Report.reporter),
        joinedload(Report.assigned_to),
        selectinload(Report.comments).joinedload(ReportComment.author),
    )

def _load(db: Session, report_id: int) -> Report:
    report = _with_relations(db.query(Report)).filter(Report.id == report_id).first()
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    return report

# Map Report model to ReportOut schema
def _report_to_out(report: Report) -> ReportOut:
    return ReportOut(
        id=report.id,
        type=report.type,
        description=report.description,
        location=Location(latitude=report.latitude, longitude=report.longitude, address=report.address),
        severity=report.severity,
        images=list(report.images or []),
        status=report.status,
        reporter=user_summary(report.reporter),
        assigned_to=user_summary(report.assigned_to),
        admin_notes=report.admin_notes or "",
        comments=[
            CommentOut(id=c.id, text=c.text, author=user_summary(c.author), created_at=c.created_at)
            for c in report.comments
        ],
        created_at=report.created_at,
        updated_at=report.updated_at,
    )

# Re-read the report with its users and push it to every client
async def _publish(db: Session, report_id: int, publisher: EventPublisher, event: str) -> ReportOut:
    out = _report_to_out(_load(db, report_id))
    await publisher.publish(event, out.model_dump(mode="json", by_alias=True))
    return out

async def _save_and_broadcast(db: Session, report_id: int, publisher: EventPublisher, event: str) -> ReportOut:
    db.commit()
    return await _publish(db, report_id, publisher, event)

# Used by user administration once it has committed changes to these reports
async def broadcast_updates(db: Session, report_ids, publisher: EventPublisher) -> None:
    for report_id in report_ids:
        await _publish(db, report_id, publisher, events.REPORT_UPDATED)


@router.get("", response_model=ReportsPage)
def list_reports(
    status_filter: Optional[List[ReportStatus]] = Query(None, alias="status"),
    type: Optional[ReportType] = Query(None),
    severity: Optional[Severity] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["createdAt", "updatedAt", "severity", "status"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
    db: Session = Depends(get_db),
):
    query = db.query(Report)

    if status_filter:
        query = query.filter(Report.status.in_([s.value for s in status_filter]))
    if type:
        query = query.filter(Report.type == type.value)
    if severity:
        query = query.filter(Report.severity == severity.value)

    sort_map = {
        "createdAt": Report.created_at,
        "updatedAt": Report.updated_at,
        "severity": _SEVERITY_RANK,
        "status": Report.status,
    }
    col = sort_map[sort_by]
    query = query.order_by(col.asc() if order == "asc" else col.desc(), Report.id.desc())

    total = query.count()
    rows = _with_relations(query).offset((page - 1) * page_size).limit(page_size).all()
    return {"items": [_report_to_out(r) for r in rows], "total": total, "page": page, "page_size": page_size}


# Reports created by or assigned to the caller
@router.get("/my", response_model=List[ReportOut])
def my_reports(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    rows = (_with_relations(db.query(Report))
            .filter(or_(Report.reporter_id == current_user.id, Report.assigned_to_id == current_user.id))
            .order_by(Report.created_at.desc(), Report.id.desc())
            .all())
    return [_report_to_out(r) for r in rows]


@router.get("/{report_id}", response_model=ReportOut)
def get_report(report_id: int, db: Session = Depends(get_db)):
    return _report_to_out(_load(db, report_id))


@router.post("", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def create_report(
    payload: ReportCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    # New reports always start in the workflow's initial state
    report = Report(
        type=payload.type.value,
        description=payload.description,
        latitude=payload.location.latitude,
        longitude=payload.location.longitude,
        address=payload.location.address,
        severity=payload.severity.value,
        images=payload.images,
        status=REPORT_WORKFLOW.initial,
        reporter_id=current_user.id,
        admin_notes="",
    )
    db.add(report)
    db.flush()
    return await _save_and_broadcast(db, report.id, publisher, events.NEW_REPORT)


@router.put("/{report_id}", response_model=ReportOut)
async def update_report(
    report_id: int,
    payload: ReportUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    report = _load(db, report_id)
    fields = payload.model_fields_set
    is_owner = report.reporter_id == current_user.id
    is_assignee = report.assigned_to_id == current_user.id

    if not (current_user.is_admin or is_owner or is_assignee):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this report")
    if fields & _CONTENT_FIELDS and not (current_user.is_admin or is_owner):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the reporter can edit this report")
    if "admin_notes" in fields and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only administrators can edit admin notes")

    # Nothing to change, so nothing to save or announce
    if not fields:
        return _report_to_out(report)

    assign = "assigned_to" in fields
    if payload.status is not None or assign:
        apply_change(db, REPORT_WORKFLOW, report, current_user,
                     new_status=payload.status, assign=assign, assignee_id=payload.assigned_to)

    if payload.type is not None:
        report.type = payload.type.value
    if payload.description is not None:
        report.description = payload.description
    if payload.location is not None:
        report.latitude = payload.location.latitude
        report.longitude = payload.location.longitude
        report.address = payload.location.address
    if payload.severity is not None:
        report.severity = payload.severity.value
    if payload.images is not None:
        report.images = payload.images
    if payload.admin_notes is not None:
        report.admin_notes = payload.admin_notes

    return await _save_and_broadcast(db, report.id, publisher, events.REPORT_UPDATED)


# Status change by an administrator or the assigned volunteer/NGO
@router.put("/{report_id}/status", response_model=ReportOut)
async def update_report_status(
    report_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    report = _load(db, report_id)
    apply_change(db, REPORT_WORKFLOW, report, current_user, new_status=payload.status)
    return await _save_and_broadcast(db, report.id, publisher, events.REPORT_UPDATED)


@router.put("/{report_id}/assign", response_model=ReportOut)
async def assign_report(
    report_id: int,
    payload: AssignUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    report = _load(db, report_id)
    apply_change(db, REPORT_WORKFLOW, report, current_user, assign=True, assignee_id=payload.assigned_to)
    out = await _save_and_broadcast(db, report.id, publisher, events.REPORT_UPDATED)

    write_log(db, user_id=current_user.id, action="REPORT_ASSIGN", resource="reports",
              resource_id=report_id, ip=client_ip(request),
              meta={"assigned_to": payload.assigned_to, "status": out.status})
    return out


@router.put("/{report_id}/notes", response_model=ReportOut)
async def update_report_notes(
    report_id: int,
    payload: NotesUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    report = _load(db, report_id)
    report.admin_notes = payload.admin_notes
    return await _save_and_broadcast(db, report.id, publisher, events.REPORT_UPDATED)


@router.post("/{report_id}/comments", response_model=ReportOut, status_code=status.HTTP_201_CREATED)
async def add_comment(
    report_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    publisher: EventPublisher = Depends(get_publisher),
):
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Comment text cannot be empty.")

    report = _load(db, report_id)
    report.comments.append(ReportComment(text=text, author_id=current_user.id))
    return await _save_and_broadcast(db, report.id, publisher, events.REPORT_UPDATED)


@router.delete("/{report_id}")
async def delete_report(
    report_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")

    report_type, report_status = report.type, report.status
    db.delete(report)
    db.commit()

    write_log(db, user_id=current_user.id, action="REPORT_DELETE", resource="reports",
              resource_id=report_id, ip=client_ip(request),
              meta={"type": report_type, "status": report_status})
    await publisher.publish(events.REPORT_DELETED, report_id)

    return {"message": "Report deleted successfully", "id": report_id}
