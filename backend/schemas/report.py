from pydantic import Field
from typing import List, Optional
from datetime import datetime

from models.enums import ReportType, Severity
from schemas.common import CamelModel, Location, UserSummary

# Input schema for submitting a new incident report
class ReportCreate(CamelModel):
    type: ReportType = ReportType.OTHER
    description: str = Field(min_length=1)
    location: Location
    severity: Severity = Severity.MEDIUM
    images: List[str] = []

# General update; status and assignment still go through the workflow
class ReportUpdate(CamelModel):
    type: Optional[ReportType] = None
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[Location] = None
    severity: Optional[Severity] = None
    images: Optional[List[str]] = None
    status: Optional[str] = None
    assigned_to: Optional[int] = None
    admin_notes: Optional[str] = None

# Schema for a comment on a report
class CommentCreate(CamelModel):
    text: str

class CommentOut(CamelModel):
    id: int
    text: str
    author: Optional[UserSummary] = None
    created_at: Optional[datetime] = None

# Output schema representing a report with populated users
class ReportOut(CamelModel):
    id: int
    type: str
    description: str
    location: Location
    severity: str
    images: List[str] = []
    status: str
    reporter: Optional[UserSummary] = None
    assigned_to: Optional[UserSummary] = None
    admin_notes: str = ""
    comments: List[CommentOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# Schema for paginated report lists
class ReportsPage(CamelModel):
    items: List[ReportOut]
    total: int
    page: int
    page_size: int
