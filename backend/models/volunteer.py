# backend/models/volunteer.py
from sqlalchemy import Column, Integer, String, Float, DateTime, JSON, func
from database import Base

# Directory entry for a volunteer; informational only, not linked to a user account
class Volunteer(Base):
    __tablename__ = "volunteers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    availability = Column(String, nullable=False) # e.g. "Weekends", "Full-time"

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    address = Column(String, nullable=True)

    registered_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
