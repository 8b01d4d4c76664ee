from pydantic import EmailStr, Field
from typing import List, Optional
from datetime import datetime

from models.enums import HelpRequestType
from schemas.common import CamelModel, Location, UserSummary

# Contact details of the person who needs help
class ContactInfo(CamelModel):
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

# Input schema for a new help (resource) request
class HelpRequestCreate(CamelModel):
    type: HelpRequestType
    description: str = Field(min_length=1)
    location: Location
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = None
    contact_info: ContactInfo

# General update; status and assignment still go through the workflow
class HelpRequestUpdate(CamelModel):
    type: Optional[HelpRequestType] = None
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[Location] = None
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    status: Optional[str] = None
    assigned_to: Optional[int] = None
    admin_notes: Optional[str] = None

class HelpRequestOut(CamelModel):
    id: int
    type: str
    description: str
    location: Location
    quantity: Optional[float] = None
    unit: Optional[str] = None
    status: str
    requested_by: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None
    contact_info: ContactInfo
    admin_notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class HelpRequestsPage(CamelModel):
    items: List[HelpRequestOut]
    total: int
    page: int
    page_size: int
