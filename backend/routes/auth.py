# backend/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import get_current_user, role_required, token_for
from utils.audit import write_log, client_ip
from utils.errors import AccountBlocked
from utils.assignment import detach_user
from utils.events import EventPublisher, get_publisher
from routes.help_requests import broadcast_updates as broadcast_help_requests
from routes.reports import broadcast_updates as broadcast_reports
from models.enums import UserRole
from models.users import User
from schemas import user as schemas
from database import get_db

router = APIRouter(prefix="/api/auth", tags=["Auth"])

admin_required = role_required(UserRole.ADMIN.value)

# Roles that need an administrator's approval before the first login
APPROVAL_ROLES = {UserRole.VOLUNTEER.value, UserRole.NGO.value}


def _auth_response(user: User, message: str) -> schemas.AuthResponse:
    profile = schemas.UserResponse.model_validate(user)
    return schemas.AuthResponse(**profile.model_dump(), token=token_for(user), message=message)


# Register a new user
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    username = user.username.strip()

    if user.role == UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Administrator accounts cannot be self-registered")

    # Check for existing user
    if db.query(User).filter(User.username == username).first():
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": username, "reason": "Username exists"})
        raise HTTPException(status_code=400, detail="User already exists")

    new_user = User(
        username=username,
        password_hash=get_password_hash(user.password),
        role=user.role.value,
        is_approved=user.role.value not in APPROVAL_ROLES,
        is_blocked=False,
        block_reason="",
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    write_log(db, user_id=new_user.id, action="REGISTER", resource="auth", status="SUCCESS",
              resource_id=new_user.id, ip=client_ip(request),
              meta={"username": new_user.username, "role": new_user.role})

    return _auth_response(new_user, "User registered successfully")


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.username == payload.username.strip()).first()

    if not db_user:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": payload.username, "reason": "Unknown user"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    # Blocked accounts are refused before the password is even checked
    if db_user.is_blocked:
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": db_user.username, "reason": "Blocked"})
        raise AccountBlocked(db_user.block_reason)

    if not db_user.is_admin and not db_user.is_approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account is pending approval. Please wait for an administrator to approve it.",
        )

    if not verify_password(payload.password, db_user.password_hash):
        write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"username": db_user.username, "reason": "Bad password"})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    write_log(db, user_id=db_user.id, action="LOGIN", resource="auth", status="SUCCESS",
              ip=client_ip(request), meta={"username": db_user.username})

    return _auth_response(db_user, "Logged in successfully")


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user


# Approve a pending Volunteer/NGO account (Admin only)
@router.put("/approve/{user_id}")
def approve_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    if user.role not in APPROVAL_ROLES:
        raise HTTPException(status_code=400, detail="Only Volunteer and NGO roles require explicit approval.")
    if user.is_approved:
        raise HTTPException(status_code=400, detail="User is already approved.")

    user.is_approved = True
    db.commit()
    db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_APPROVE", resource="users", resource_id=user.id,
              ip=client_ip(request))

    return {
        "message": f"User '{user.username}' approved successfully.",
        "user": schemas.UserResponse.model_validate(user).model_dump(mode="json", by_alias=True),
    }


# Reject a pending account by deleting it (Admin only)
@router.delete("/reject/{user_id}")
async def reject_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
    publisher: EventPublisher = Depends(get_publisher),
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot reject your own account.")
    if user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Cannot reject (delete) an Admin user via this interface.")

    username = user.username
    report_ids, request_ids = detach_user(db, user, current_user)
    db.delete(user)
    db.commit()

    write_log(db, user_id=current_user.id, action="USER_REJECT", resource="users", resource_id=user_id,
              ip=client_ip(request), meta={"username": username})
    await broadcast_reports(db, report_ids, publisher)
    await broadcast_help_requests(db, request_ids, publisher)

    return {"message": f"User '{username}' rejected and deleted successfully."}
