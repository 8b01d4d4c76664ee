# backend/routes/users.py
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from typing import Optional, Literal
from sqlalchemy.orm import Session
from database import get_db
from models.enums import UserRole
from models.users import User
from utils.tokenJWT import role_required
from utils.audit import write_log, client_ip
from schemas.user import UserAdminUpdate, UserResponse, UsersPage
from routes.help_requests import broadcast_updates as broadcast_help_requests
from routes.reports import broadcast_updates as broadcast_reports
from utils.assignment import detach_user, unassign_user
from utils.events import EventPublisher, get_publisher
from utils.workflow import ASSIGNEE_ROLES

# Every route here is restricted to administrators
router = APIRouter(prefix="/api/users", tags=["Users"])

admin_required = role_required(UserRole.ADMIN.value)


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Retrieve a list of users with filtering, sorting, and pagination
@router.get("", response_model=UsersPage)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by username"),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_approved: Optional[bool] = Query(None, alias="isApproved"),
    is_blocked: Optional[bool] = Query(None, alias="isBlocked"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "username", "role", "createdAt"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(User)

    if q:
        query = query.filter(User.username.ilike(f"%{q}%"))
    if role:
        query = query.filter(User.role == role.value)
    if is_approved is not None:
        query = query.filter(User.is_approved == is_approved)
    if is_blocked is not None:
        query = query.filter(User.is_blocked == is_blocked)

    sort_map = {
        "id": User.id,
        "username": User.username,
        "role": User.role,
        "createdAt": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    # Apply pagination
    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(admin_required)):
    return _get_user_or_404(db, user_id)


# Update username, role, approval or block status
@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserAdminUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    user = _get_user_or_404(db, user_id)

    if payload.password is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Password cannot be updated via this route.")

    # Prevent an admin from locking themselves out
    if user.id == current_user.id and (payload.is_blocked is True or payload.is_approved is False):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Admin cannot block or deactivate their own account.")

    if payload.username and payload.username != user.username:
        taken = db.query(User).filter(User.username == payload.username, User.id != user.id).first()
        if taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already taken")
        user.username = payload.username

    report_ids, request_ids = [], []
    if payload.role is not None:
        # Only Volunteers and NGOs may hold assignments
        if user.role in ASSIGNEE_ROLES and payload.role.value not in ASSIGNEE_ROLES:
            report_ids, request_ids = unassign_user(db, user, current_user)
        user.role = payload.role.value
    if payload.is_approved is not None:
        user.is_approved = payload.is_approved

    if payload.is_blocked is not None:
        user.is_blocked = payload.is_blocked
        if payload.is_blocked:
            if payload.block_reason is not None:
                user.block_reason = payload.block_reason
        else:
            user.block_reason = ""

    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users", resource_id=user.id,
              ip=client_ip(request), meta={"fields": sorted(payload.model_fields_set)})
    await broadcast_reports(db, report_ids, publisher)
    await broadcast_help_requests(db, request_ids, publisher)

    return user


# Delete a user account
@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    user = _get_user_or_404(db, user_id)

    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Admin cannot delete their own account via this interface.")

    username = user.username
    report_ids, request_ids = detach_user(db, user, current_user)
    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users", resource_id=user_id,
              ip=client_ip(request), meta={"username": username})
    await broadcast_reports(db, report_ids, publisher)
    await broadcast_help_requests(db, request_ids, publisher)

    return {"message": "User removed successfully"}
