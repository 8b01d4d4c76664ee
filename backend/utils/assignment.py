# backend/utils/assignment.py
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models.help_request import HelpRequest
from models.report import Report, ReportComment
from models.users import User
from utils.workflow import (
    HELP_REQUEST_WORKFLOW, REPORT_WORKFLOW, Change, ItemState, Party, Workflow
)

# Glue between the ORM objects and the pure workflow in utils/workflow.py

def party(user: User) -> Party:
    return Party(id=user.id, role=user.role)

def resolve_assignee(db: Session, user_id: Optional[int]) -> Optional[Party]:
    if user_id is None:
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignee not found")
    return party(user)

def apply_change(db: Session, workflow: Workflow, item, actor: User, *,
                 new_status: Optional[str] = None, assign: bool = False,
                 assignee_id: Optional[int] = None) -> None:
    """Run the workflow for ``item`` and copy the resulting state onto it (no commit)."""
    change = Change(
        status=new_status,
        assign=assign,
        # Non-admins are refused by the workflow before any lookup happens
        assignee=resolve_assignee(db, assignee_id) if assign and actor.is_admin else None,
    )
    current = ItemState(status=item.status, assignee_id=item.assigned_to_id)
    result = workflow.apply_transition(current, party(actor), change)
    item.status = result.status
    item.assigned_to_id = result.assignee_id

def unassign_user(db: Session, user: User, actor: User) -> Tuple[List[int], List[int]]:
    """Unassign ``user`` from every report and help request (no commit).

    Goes through the workflow so items auto-advanced by the assignment fall
    back to Pending. Returns the ids of the touched reports and help requests.
    """
    touched = []
    for model, workflow in ((Report, REPORT_WORKFLOW), (HelpRequest, HELP_REQUEST_WORKFLOW)):
        items = db.query(model).filter(model.assigned_to_id == user.id).all()
        for item in items:
            apply_change(db, workflow, item, actor, assign=True, assignee_id=None)
        touched.append([item.id for item in items])
    return touched[0], touched[1]

def detach_user(db: Session, user: User, actor: User) -> Tuple[List[int], List[int]]:
    """Clear every reference to ``user`` ahead of deleting the account (no commit)."""
    report_ids, request_ids = unassign_user(db, user, actor)

    for report in db.query(Report).filter(Report.reporter_id == user.id).all():
        report.reporter_id = None
        report_ids.append(report.id)
    for hr in db.query(HelpRequest).filter(HelpRequest.requested_by_id == user.id).all():
        hr.requested_by_id = None
        request_ids.append(hr.id)
    for comment in db.query(ReportComment).filter(ReportComment.author_id == user.id).all():
        comment.author_id = None
        report_ids.append(comment.report_id)

    return sorted(set(report_ids)), sorted(set(request_ids))
