# backend/utils/workflow.py
"""Status/assignment state machine shared by reports and help requests.

The functions here know nothing about HTTP or the database: callers describe
the item's current state, who is acting and what they want to change, and get
back the new state or a ``TransitionError``. Routes translate the result onto
the ORM object and the exception handlers turn errors into responses.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from models.enums import UserRole, ReportStatus, HelpRequestStatus

ASSIGNEE_ROLES = frozenset({UserRole.VOLUNTEER.value, UserRole.NGO.value})


class TransitionError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidStatus(TransitionError):
    status_code = 400


class InvalidAssignee(TransitionError):
    status_code = 400


class TransitionForbidden(TransitionError):
    status_code = 403


@dataclass(frozen=True)
class Party:
    """A user taking part in a transition, either acting or being assigned."""
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


@dataclass(frozen=True)
class ItemState:
    status: str
    assignee_id: Optional[int] = None


@dataclass(frozen=True)
class Change:
    """Requested modification.

    ``assign`` tells whether the assignee is being set at all; with
    ``assign=True`` an ``assignee`` of ``None`` means "unassign".
    """
    status: Optional[str] = None
    assign: bool = False
    assignee: Optional[Party] = None


def _plain(value) -> str:
    # Accept enum members as well as raw strings
    return getattr(value, "value", value)


@dataclass(frozen=True)
class Workflow:
    entity: str
    statuses: Tuple[str, ...]
    initial: str
    assigned_status: str
    auto_advance_from: FrozenSet[str]
    assignee_statuses: FrozenSet[str]

    def apply_transition(self, current: ItemState, actor: Party, change: Change) -> ItemState:
        status = _plain(current.status)
        assignee_id = current.assignee_id

        if change.assign:
            if not actor.is_admin:
                raise TransitionForbidden(f"Only administrators can assign a {self.entity}")

            if change.assignee is None:
                if status == self.assigned_status:
                    status = self.initial
                assignee_id = None
            else:
                if change.assignee.role not in ASSIGNEE_ROLES:
                    raise InvalidAssignee(
                        f"A {self.entity} can only be assigned to a Volunteer or NGO user"
                    )
                if status in self.auto_advance_from:
                    status = self.assigned_status
                assignee_id = change.assignee.id

        if change.status is not None:
            requested = _plain(change.status)
            if not actor.is_admin:
                # Permission is decided against the assignee before this change
                if current.assignee_id is None or current.assignee_id != actor.id:
                    raise TransitionForbidden(
                        f"Only the assigned volunteer or NGO can update this {self.entity}"
                    )
                if requested not in self.assignee_statuses:
                    raise TransitionForbidden(
                        f"Assignees cannot set a {self.entity} to '{requested}'"
                    )
            elif requested not in self.statuses:
                raise InvalidStatus(f"Invalid {self.entity} status '{requested}'")
            status = requested

        return ItemState(status=status, assignee_id=assignee_id)


REPORT_WORKFLOW = Workflow(
    entity="report",
    statuses=tuple(s.value for s in ReportStatus),
    initial=ReportStatus.PENDING.value,
    assigned_status=ReportStatus.ASSIGNED.value,
    auto_advance_from=frozenset({ReportStatus.PENDING.value, ReportStatus.RECEIVED.value}),
    assignee_statuses=frozenset({
        ReportStatus.RECEIVED.value,
        ReportStatus.IN_PROGRESS.value,
        ReportStatus.RESOLVED.value,
        ReportStatus.CLOSED.value,
    }),
)

HELP_REQUEST_WORKFLOW = Workflow(
    entity="help request",
    statuses=tuple(s.value for s in HelpRequestStatus),
    initial=HelpRequestStatus.PENDING.value,
    assigned_status=HelpRequestStatus.IN_PROGRESS.value,
    auto_advance_from=frozenset({HelpRequestStatus.PENDING.value, HelpRequestStatus.RECEIVED.value}),
    assignee_statuses=frozenset({
        HelpRequestStatus.RECEIVED.value,
        HelpRequestStatus.IN_PROGRESS.value,
        HelpRequestStatus.FULFILLED.value,
    }),
)
