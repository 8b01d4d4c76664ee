from pydantic import EmailStr, Field
from typing import List, Optional
from datetime import datetime

from models.enums import VolunteerSkill
from schemas.common import CamelModel

class VolunteerContact(CamelModel):
    email: EmailStr
    phone: Optional[str] = None

# Location is optional for volunteers, so every coordinate is too
class VolunteerLocation(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

class VolunteerCreate(CamelModel):
    name: str = Field(min_length=1)
    contact_info: VolunteerContact
    skills: List[VolunteerSkill] = Field(min_length=1)
    availability: str = Field(min_length=1)
    location: Optional[VolunteerLocation] = None

class VolunteerUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    contact_info: Optional[VolunteerContact] = None
    skills: Optional[List[VolunteerSkill]] = Field(None, min_length=1)
    availability: Optional[str] = Field(None, min_length=1)
    location: Optional[VolunteerLocation] = None

class VolunteerOut(CamelModel):
    id: int
    name: str
    contact_info: VolunteerContact
    skills: List[str]
    availability: str
    location: Optional[VolunteerLocation] = None
    registered_at: Optional[datetime] = None
