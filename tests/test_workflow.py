import pytest

from models.enums import HelpRequestStatus, ReportStatus
from utils.workflow import (
    HELP_REQUEST_WORKFLOW,
    REPORT_WORKFLOW,
    Change,
    InvalidAssignee,
    InvalidStatus,
    ItemState,
    Party,
    TransitionError,
    TransitionForbidden,
)

ADMIN = Party(id=1, role="Admin")
VOLUNTEER = Party(id=2, role="Volunteer")
NGO = Party(id=3, role="NGO")
CITIZEN = Party(id=4, role="Public")


def assign(party, status=None):
    return Change(status=status, assign=True, assignee=party)


UNASSIGN = Change(assign=True, assignee=None)


class TestAssignment:
    @pytest.mark.parametrize("start", ["Pending", "Received"])
    def test_assigning_report_advances_to_assigned(self, start):
        result = REPORT_WORKFLOW.apply_transition(ItemState(start), ADMIN, assign(VOLUNTEER))
        assert result == ItemState("Assigned", VOLUNTEER.id)

    @pytest.mark.parametrize("start", ["Pending", "Received"])
    def test_assigning_help_request_advances_to_in_progress(self, start):
        result = HELP_REQUEST_WORKFLOW.apply_transition(ItemState(start), ADMIN, assign(NGO))
        assert result == ItemState("In Progress", NGO.id)

    def test_assigning_later_status_keeps_it(self):
        result = REPORT_WORKFLOW.apply_transition(ItemState("Resolved"), ADMIN, assign(VOLUNTEER))
        assert result == ItemState("Resolved", VOLUNTEER.id)

    def test_reassigning_same_user_is_idempotent(self):
        first = REPORT_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, assign(VOLUNTEER))
        second = REPORT_WORKFLOW.apply_transition(first, ADMIN, assign(VOLUNTEER))
        assert second == first

    def test_reassigning_after_assignee_progress_keeps_progress(self):
        current = ItemState("In Progress", VOLUNTEER.id)
        result = REPORT_WORKFLOW.apply_transition(current, ADMIN, assign(VOLUNTEER))
        assert result == current

    def test_unassigning_auto_advanced_report_reverts_to_pending(self):
        result = REPORT_WORKFLOW.apply_transition(ItemState("Assigned", VOLUNTEER.id), ADMIN, UNASSIGN)
        assert result == ItemState("Pending", None)

    def test_unassigning_help_request_reverts_to_pending(self):
        result = HELP_REQUEST_WORKFLOW.apply_transition(ItemState("In Progress", NGO.id), ADMIN, UNASSIGN)
        assert result == ItemState("Pending", None)

    def test_unassigning_finished_report_keeps_status(self):
        result = REPORT_WORKFLOW.apply_transition(ItemState("Resolved", VOLUNTEER.id), ADMIN, UNASSIGN)
        assert result == ItemState("Resolved", None)

    @pytest.mark.parametrize("target", [CITIZEN, ADMIN])
    def test_assignee_must_be_volunteer_or_ngo(self, target):
        with pytest.raises(InvalidAssignee) as exc:
            REPORT_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, assign(target))
        assert exc.value.status_code == 400

    @pytest.mark.parametrize("actor", [VOLUNTEER, NGO, CITIZEN])
    def test_only_admin_can_assign(self, actor):
        with pytest.raises(TransitionForbidden):
            REPORT_WORKFLOW.apply_transition(ItemState("Pending"), actor, assign(VOLUNTEER))

    def test_explicit_status_applies_after_assignment(self):
        result = REPORT_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, assign(VOLUNTEER, status="Received"))
        assert result == ItemState("Received", VOLUNTEER.id)


class TestStatusChanges:
    @pytest.mark.parametrize("target", [s.value for s in ReportStatus])
    def test_admin_may_set_any_report_status(self, target):
        result = REPORT_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, Change(status=target))
        assert result.status == target

    def test_admin_cannot_set_unknown_status(self):
        with pytest.raises(InvalidStatus):
            REPORT_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, Change(status="Done"))

    def test_help_request_has_no_assigned_status(self):
        with pytest.raises(InvalidStatus):
            HELP_REQUEST_WORKFLOW.apply_transition(ItemState("Pending"), ADMIN, Change(status="Assigned"))

    def test_enum_members_are_accepted(self):
        result = HELP_REQUEST_WORKFLOW.apply_transition(
            ItemState(HelpRequestStatus.PENDING), ADMIN, Change(status=HelpRequestStatus.FULFILLED)
        )
        assert result.status == "Fulfilled"

    @pytest.mark.parametrize("target", ["Received", "In Progress", "Resolved", "Closed"])
    def test_assignee_may_progress_report(self, target):
        current = ItemState("Assigned", VOLUNTEER.id)
        result = REPORT_WORKFLOW.apply_transition(current, VOLUNTEER, Change(status=target))
        assert result == ItemState(target, VOLUNTEER.id)

    @pytest.mark.parametrize("target", ["Received", "In Progress", "Fulfilled"])
    def test_assignee_may_progress_help_request(self, target):
        current = ItemState("In Progress", NGO.id)
        result = HELP_REQUEST_WORKFLOW.apply_transition(current, NGO, Change(status=target))
        assert result.status == target

    @pytest.mark.parametrize("workflow", [REPORT_WORKFLOW, HELP_REQUEST_WORKFLOW])
    @pytest.mark.parametrize("actor", [VOLUNTEER, NGO, CITIZEN])
    def test_non_admin_outside_allowed_set_is_forbidden(self, workflow, actor):
        current = ItemState(workflow.assigned_status, actor.id)
        for target in set(workflow.statuses) - workflow.assignee_statuses:
            with pytest.raises(TransitionForbidden) as exc:
                workflow.apply_transition(current, actor, Change(status=target))
            assert exc.value.status_code == 403

    def test_assignee_cannot_reject_or_cancel(self):
        with pytest.raises(TransitionForbidden):
            REPORT_WORKFLOW.apply_transition(ItemState("Assigned", VOLUNTEER.id), VOLUNTEER, Change(status="Rejected"))
        with pytest.raises(TransitionForbidden):
            HELP_REQUEST_WORKFLOW.apply_transition(ItemState("In Progress", NGO.id), NGO, Change(status="Cancelled"))

    def test_non_assignee_cannot_change_status(self):
        current = ItemState("Assigned", VOLUNTEER.id)
        with pytest.raises(TransitionForbidden):
            REPORT_WORKFLOW.apply_transition(current, NGO, Change(status="In Progress"))

    def test_unassigned_item_cannot_be_progressed_by_non_admin(self):
        with pytest.raises(TransitionForbidden):
            REPORT_WORKFLOW.apply_transition(ItemState("Pending"), VOLUNTEER, Change(status="Received"))

    def test_errors_share_a_base_class(self):
        assert issubclass(InvalidStatus, TransitionError)
        assert issubclass(TransitionForbidden, TransitionError)

    def test_empty_change_returns_current_state(self):
        current = ItemState("Received", VOLUNTEER.id)
        assert REPORT_WORKFLOW.apply_transition(current, ADMIN, Change()) == current
