"""Tests for request filtering, the pending-approval queue and overdue detection."""
from datetime import timedelta
from decimal import Decimal

from money_requests.models.approval_step import ApprovalStep
from money_requests.models.enums import Priority, StepDecision
from money_requests.schemas.money_request import MoneyRequestFilters
from money_requests.services.approval_workflow_service import approval_workflow_service as workflow
from money_requests.services.request_query_service import is_overdue, request_query_service as queries
from money_requests.utils.clock import utcnow


def ids(requests):
    return [r.id for r in requests]


class TestListRequests:

    def test_status_filter(self, db, make_request, submitted_request):
        draft = make_request("50")
        pending = submitted_request("300")

        assert ids(queries.list_requests(MoneyRequestFilters(status=["draft"]), db)) == [draft.id]
        assert ids(queries.list_requests(MoneyRequestFilters(status=["pending_treasurer_approval"]), db)) == [pending.id]
        assert set(ids(queries.list_requests(MoneyRequestFilters(status=["draft", "pending_treasurer_approval"]), db))) == {draft.id, pending.id}

    def test_department_and_requester_filters(self, db, users, music, make_request):
        youth_request = make_request("100")
        music_request = make_request("100", department=music, requester=users["treasurer"])

        assert ids(queries.list_requests(MoneyRequestFilters(department_id=music.id), db)) == [music_request.id]
        assert ids(queries.list_requests(MoneyRequestFilters(requester_id=users["member"].id), db)) == [youth_request.id]

    def test_priority_filter(self, db, make_request):
        urgent = make_request("100", priority=Priority.URGENT)
        make_request("100", priority=Priority.LOW)

        result = queries.list_requests(MoneyRequestFilters(priority=[Priority.URGENT, Priority.HIGH]), db)
        assert ids(result) == [urgent.id]

    def test_amount_range(self, db, make_request):
        make_request("50")
        middle = make_request("250")
        make_request("900")

        result = queries.list_requests(MoneyRequestFilters(min_amount=Decimal("100"), max_amount=Decimal("500")), db)
        assert ids(result) == [middle.id]

    def test_date_range(self, db, make_request):
        old = make_request("100")
        recent = make_request("100")
        old.created_at = utcnow() - timedelta(days=30)
        db.commit()

        start = utcnow() - timedelta(days=1)
        assert ids(queries.list_requests(MoneyRequestFilters(start_date=start), db)) == [recent.id]
        assert ids(queries.list_requests(MoneyRequestFilters(end_date=start), db)) == [old.id]

    def test_search_covers_purpose_vendor_and_project(self, db, make_request):
        by_purpose = make_request("100", purpose="Choir robes")
        by_vendor = make_request("100", purpose="Sound system", suggested_vendor="ROBERTSON Audio")
        by_project = make_request("100", purpose="Paint", associated_project="Hall refurbishment")
        make_request("100", purpose="Snacks")

        assert set(ids(queries.list_requests(MoneyRequestFilters(search_term="rob"), db))) == {by_purpose.id, by_vendor.id}
        assert ids(queries.list_requests(MoneyRequestFilters(search_term="REFURB"), db)) == [by_project.id]

    def test_paging(self, db, make_request):
        for _ in range(5):
            make_request("100")

        assert len(queries.list_requests(MoneyRequestFilters(limit=2), db)) == 2
        assert len(queries.list_requests(MoneyRequestFilters(skip=4, limit=10), db)) == 1


class TestPendingForUser:

    def test_queue_follows_current_step(self, db, actors, submitted_request):
        request = submitted_request("300")

        assert ids(queries.pending_for_user(actors["treasurer"], db)) == [request.id]
        assert queries.pending_for_user(actors["hod"], db) == []

        first = workflow.list_steps(request.id, db)[0]
        workflow.decide(actors["treasurer"], first.id, True, None, db)

        assert queries.pending_for_user(actors["treasurer"], db) == []
        assert ids(queries.pending_for_user(actors["hod"], db)) == [request.id]

    def test_override_roles_see_every_active_chain(self, db, actors, make_request, submitted_request):
        make_request("50")
        first = submitted_request("300")
        second = submitted_request("800")

        assert ids(queries.pending_for_user(actors["pastor"], db)) == [first.id, second.id]

    def test_finished_and_rejected_requests_drop_out(self, db, actors, submitted_request):
        request = submitted_request("800")
        first, second, third = workflow.list_steps(request.id, db)
        workflow.decide(actors["treasurer"], first.id, True, None, db)
        workflow.decide(actors["hod"], second.id, False, None, db)

        assert queries.pending_for_user(actors["elder"], db) == []
        assert queries.pending_for_user(actors["admin"], db) == []

    def test_user_without_role_has_empty_queue(self, db, actors, submitted_request):
        submitted_request("300")

        assert queries.pending_for_user(actors["norole"], db) == []


class TestOverdue:

    def test_pending_step_past_due_is_overdue(self):
        step = ApprovalStep(decision=StepDecision.PENDING, due_date=utcnow() - timedelta(hours=1))
        assert is_overdue(step)

    def test_future_due_date_is_not_overdue(self):
        step = ApprovalStep(decision=StepDecision.PENDING, due_date=utcnow() + timedelta(hours=1))
        assert not is_overdue(step)

    def test_decided_step_is_never_overdue(self):
        step = ApprovalStep(decision=StepDecision.APPROVED, due_date=utcnow() - timedelta(hours=1))
        assert not is_overdue(step)

    def test_step_without_due_date(self):
        assert not is_overdue(ApprovalStep(decision=StepDecision.PENDING, due_date=None))

    def test_overdue_steps_lists_only_current_steps(self, db, submitted_request):
        request = submitted_request("300")
        first, second = workflow.list_steps(request.id, db)

        assert queries.overdue_steps(db) == []

        later = utcnow() + timedelta(hours=49)
        assert [s.id for s in queries.overdue_steps(db, now=later)] == [first.id]
