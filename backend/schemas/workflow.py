from typing import Optional

from schemas.common import CamelModel

# Bodies of the workflow endpoints shared by reports and help requests

class StatusUpdate(CamelModel):
    status: str

# assignedTo is required; null unassigns
class AssignUpdate(CamelModel):
    assigned_to: Optional[int]

class NotesUpdate(CamelModel):
    admin_notes: str
