# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from database import Base
from models.enums import UserRole

# Represents a user account with authentication details, system role and moderation flags
class User(Base):
    __tablename__ = "users"
    # Never hand a deleted account's id to a new one
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.PUBLIC.value)

    # Volunteers and NGOs wait for an administrator before they can log in
    is_approved = Column(Boolean, nullable=False, default=True)
    is_blocked = Column(Boolean, nullable=False, default=False)
    block_reason = Column(String, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
