# backend/models/enums.py
import enum

# Kept free of SQLAlchemy imports so the workflow module can use them standalone


class UserRole(str, enum.Enum):
    PUBLIC = "Public"
    VOLUNTEER = "Volunteer"
    NGO = "NGO"
    ADMIN = "Admin"


class ReportType(str, enum.Enum):
    FLOOD = "Flood"
    EARTHQUAKE = "Earthquake"
    FIRE = "Fire"
    MEDICAL_EMERGENCY = "Medical Emergency"
    ACCIDENT = "Accident"
    MISSING_PERSON = "Missing Person"
    OTHER = "Other"


class Severity(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ReportStatus(str, enum.Enum):
    PENDING = "Pending"
    RECEIVED = "Received"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    REJECTED = "Rejected"


class HelpRequestType(str, enum.Enum):
    FOOD = "Food"
    WATER = "Water"
    MEDICAL = "Medical"
    SHELTER = "Shelter"
    RESCUE = "Rescue"
    OTHER = "Other"


# No "Assigned" here: assignment moves a help request straight to In Progress
class HelpRequestStatus(str, enum.Enum):
    PENDING = "Pending"
    RECEIVED = "Received"
    IN_PROGRESS = "In Progress"
    FULFILLED = "Fulfilled"
    CANCELLED = "Cancelled"
    REJECTED = "Rejected"


class VolunteerSkill(str, enum.Enum):
    MEDICAL = "Medical"
    SEARCH_AND_RESCUE = "Search & Rescue"
    LOGISTICS = "Logistics"
    FOOD_DISTRIBUTION = "Food Distribution"
    SHELTER_MANAGEMENT = "Shelter Management"
    FIRST_AID = "First Aid"
    IT_SUPPORT = "IT Support"
    OTHER = "Other"
