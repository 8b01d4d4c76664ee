from pydantic import Field
from typing import List, Optional
from datetime import datetime

from models.enums import UserRole
from schemas.common import CamelModel

# Schema for user authentication credentials
class UserLogin(CamelModel):
    username: str
    password: str

# Schema for user registration requests
class UserCreate(CamelModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    role: UserRole = UserRole.PUBLIC

# Output schema for user profile details
class UserResponse(CamelModel):
    id: int
    username: str
    role: str
    is_approved: bool
    is_blocked: bool
    block_reason: str = ""
    created_at: Optional[datetime] = None

# Returned by register/login: the profile plus a bearer token
class AuthResponse(UserResponse):
    token: str
    message: str

# Schema for administrative user updates; password is rejected by the route
class UserAdminUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    role: Optional[UserRole] = None
    is_approved: Optional[bool] = None
    is_blocked: Optional[bool] = None
    block_reason: Optional[str] = None
    password: Optional[str] = None

# Schema for paginated user list response
class UsersPage(CamelModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int
