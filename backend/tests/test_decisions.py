"""Tests for step gating, decision recording and the fund debit on final approval."""
from decimal import Decimal

import pytest
from sqlalchemy import text

from money_requests.config import settings
from money_requests.exceptions import FundDebitFailed, NotAuthorizedToDecide, StepAlreadyDecided
from money_requests.models.approval_step import ApprovalStep
from money_requests.models.enums import StepDecision
from money_requests.services import approval_workflow_service as workflow_module
from money_requests.services.approval_workflow_service import approval_workflow_service as workflow, find_current_step


def steps_of(db, request):
    return workflow.list_steps(request.id, db)


class TestFindCurrentStep:

    def test_lowest_pending_step(self):
        steps = [
            ApprovalStep(id=2, step_order=2, decision=StepDecision.PENDING),
            ApprovalStep(id=1, step_order=1, decision=StepDecision.APPROVED),
            ApprovalStep(id=3, step_order=3, decision=StepDecision.PENDING),
        ]
        assert find_current_step(steps).id == 2

    def test_none_when_all_decided(self):
        steps = [
            ApprovalStep(id=1, step_order=1, decision=StepDecision.APPROVED),
            ApprovalStep(id=2, step_order=2, decision=StepDecision.APPROVED),
        ]
        assert find_current_step(steps) is None

    def test_none_after_rejection(self):
        steps = [
            ApprovalStep(id=1, step_order=1, decision=StepDecision.REJECTED),
            ApprovalStep(id=2, step_order=2, decision=StepDecision.PENDING),
        ]
        assert find_current_step(steps) is None

    def test_empty_chain(self):
        assert find_current_step([]) is None


class TestApprovalFlow:

    def test_youth_example_scenario(self, db, actors, general_fund, submitted_request):
        request = submitted_request("300")
        first, second = steps_of(db, request)

        assert workflow.decide(actors["treasurer"], first.id, True, "Budget checked", db) == "pending_head_of_department_approval"
        assert workflow.current_step(request.id, db).id == second.id

        assert workflow.decide(actors["hod"], second.id, True, None, db) == "approved"

        db.refresh(request)
        db.refresh(general_fund)
        assert request.status == "approved"
        assert general_fund.current_balance == Decimal("700.00")
        assert workflow.current_step(request.id, db) is None

    def test_three_step_round_trip(self, db, actors, general_fund, submitted_request):
        request = submitted_request("800")
        deciders = [actors["treasurer"], actors["hod"], actors["elder"]]

        for decider, step in zip(deciders, steps_of(db, request)):
            db.refresh(general_fund)
            assert general_fund.current_balance == Decimal("1000.00")
            workflow.decide(decider, step.id, True, None, db)

        history = workflow.status_history(request.id, db)
        assert [h.new_status for h in history] == [
            "draft",
            "pending_treasurer_approval",
            "pending_head_of_department_approval",
            "pending_finance_elder_approval",
            "approved",
        ]
        db.refresh(general_fund)
        assert general_fund.current_balance == Decimal("200.00")

    def test_decision_records_approver_and_comment(self, db, users, actors, submitted_request):
        request = submitted_request("300")
        first = steps_of(db, request)[0]

        workflow.decide(actors["treasurer"], first.id, True, "Within budget", db)

        db.refresh(first)
        assert first.decision == StepDecision.APPROVED
        assert first.approver_id == users["treasurer"].id
        assert first.comments == "Within budget"
        assert first.decided_at is not None

    def test_override_role_may_decide_any_current_step(self, db, actors, submitted_request):
        request = submitted_request("300")
        first, second = steps_of(db, request)

        assert workflow.decide(actors["pastor"], first.id, True, None, db) == "pending_head_of_department_approval"
        assert workflow.decide(actors["admin"], second.id, True, None, db) == "approved"

    def test_overdraft_is_permitted_by_default(self, db, actors, general_fund, submitted_request):
        general_fund.current_balance = Decimal("100.00")
        db.commit()
        request = submitted_request("300")

        for decider, step in zip([actors["treasurer"], actors["hod"]], steps_of(db, request)):
            workflow.decide(decider, step.id, True, None, db)

        db.refresh(general_fund)
        assert general_fund.current_balance == Decimal("-200.00")


class TestRejection:

    def test_rejecting_step_two_short_circuits(self, db, actors, general_fund, submitted_request):
        request = submitted_request("800")
        first, second, third = steps_of(db, request)

        workflow.decide(actors["treasurer"], first.id, True, None, db)
        assert workflow.decide(actors["hod"], second.id, False, "Not this quarter", db) == "rejected"

        db.refresh(request)
        db.refresh(third)
        assert request.status == "rejected"
        assert third.decision == StepDecision.PENDING
        assert workflow.current_step(request.id, db) is None
        assert not workflow.can_decide(actors["elder"], request, third)

        with pytest.raises(NotAuthorizedToDecide):
            workflow.decide(actors["elder"], third.id, True, None, db)

        db.refresh(third)
        db.refresh(general_fund)
        assert third.decision == StepDecision.PENDING
        assert general_fund.current_balance == Decimal("1000.00")

    def test_rejection_is_terminal_for_override_roles_too(self, db, actors, submitted_request):
        request = submitted_request("300")
        first, second = steps_of(db, request)
        workflow.decide(actors["treasurer"], first.id, False, None, db)

        with pytest.raises(NotAuthorizedToDecide):
            workflow.decide(actors["admin"], second.id, True, None, db)


class TestGating:

    def test_wrong_role_is_not_authorized(self, db, users, actors, submitted_request):
        request = submitted_request("300")
        first = steps_of(db, request)[0]

        assert not workflow.can_decide(actors["hod"], request, first)
        assert not workflow.can_user_decide(users["hod"].id, request.id, db)
        with pytest.raises(NotAuthorizedToDecide):
            workflow.decide(actors["hod"], first.id, True, None, db)

        db.refresh(first)
        db.refresh(request)
        assert first.decision == StepDecision.PENDING
        assert request.status == "pending_treasurer_approval"

    def test_user_without_role_is_not_authorized(self, db, users, actors, submitted_request):
        request = submitted_request("300")
        first = steps_of(db, request)[0]

        assert not workflow.can_user_decide(users["norole"].id, request.id, db)
        with pytest.raises(NotAuthorizedToDecide):
            workflow.decide(actors["norole"], first.id, True, None, db)

    def test_later_step_cannot_be_decided_first(self, db, actors, submitted_request):
        request = submitted_request("300")
        second = steps_of(db, request)[1]

        assert not workflow.can_decide(actors["hod"], request, second)
        with pytest.raises(NotAuthorizedToDecide):
            workflow.decide(actors["hod"], second.id, True, None, db)

    def test_matching_role_can_decide_current_step(self, db, users, submitted_request):
        request = submitted_request("300")

        assert workflow.can_user_decide(users["treasurer"].id, request.id, db)
        assert workflow.can_user_decide(users["pastor"].id, request.id, db)

    def test_draft_request_has_nothing_to_decide(self, db, users, make_request):
        request = make_request("300")

        assert workflow.current_step(request.id, db) is None
        assert not workflow.can_user_decide(users["treasurer"].id, request.id, db)


class TestAlreadyDecided:

    def test_second_decision_is_rejected_without_state_change(self, db, actors, general_fund, submitted_request):
        request = submitted_request("300")
        first, second = steps_of(db, request)
        workflow.decide(actors["treasurer"], first.id, True, None, db)
        workflow.decide(actors["hod"], second.id, True, None, db)
        history_before = len(workflow.status_history(request.id, db))

        with pytest.raises(StepAlreadyDecided):
            workflow.decide(actors["hod"], second.id, True, None, db)
        with pytest.raises(StepAlreadyDecided):
            workflow.decide(actors["admin"], second.id, False, None, db)

        db.refresh(request)
        db.refresh(general_fund)
        assert request.status == "approved"
        assert general_fund.current_balance == Decimal("700.00")
        assert len(workflow.status_history(request.id, db)) == history_before

    def test_losing_a_race_raises_already_decided(self, db, actors, submitted_request):
        request = submitted_request("300")
        first = steps_of(db, request)[0]

        # Another reviewer decides the step behind this session's back
        db.expire_on_commit = False
        db.execute(text("UPDATE approval_steps SET decision = 'approved' WHERE id = :id"), {"id": first.id})
        db.commit()
        assert first.decision == StepDecision.PENDING

        with pytest.raises(StepAlreadyDecided):
            workflow.decide(actors["treasurer"], first.id, False, None, db)

        db.refresh(request)
        db.refresh(first)
        assert first.decision == StepDecision.APPROVED
        assert request.status == "pending_treasurer_approval"
        assert len(workflow.status_history(request.id, db)) == 2


class TestFundDebitFailure:

    def test_failed_debit_rolls_back_final_approval(self, db, actors, general_fund, submitted_request, monkeypatch):
        request = submitted_request("300")
        first, second = steps_of(db, request)
        workflow.decide(actors["treasurer"], first.id, True, None, db)

        def failing_debit(fund_type_id, amount, db):
            raise FundDebitFailed("ledger unavailable")

        monkeypatch.setattr(workflow_module.fund_service, "debit_fund", failing_debit)

        with pytest.raises(FundDebitFailed):
            workflow.decide(actors["hod"], second.id, True, None, db)

        db.refresh(request)
        db.refresh(second)
        db.refresh(general_fund)
        assert second.decision == StepDecision.PENDING
        assert second.approver_id is None
        assert request.status == "pending_head_of_department_approval"
        assert general_fund.current_balance == Decimal("1000.00")
        assert workflow.status_history(request.id, db)[-1].new_status == "pending_head_of_department_approval"

    def test_overdraft_blocked_when_disabled(self, db, actors, general_fund, submitted_request, monkeypatch):
        monkeypatch.setattr(settings, "allow_fund_overdraft", False)
        general_fund.current_balance = Decimal("100.00")
        db.commit()
        request = submitted_request("300")
        first, second = steps_of(db, request)
        workflow.decide(actors["treasurer"], first.id, True, None, db)

        with pytest.raises(FundDebitFailed):
            workflow.decide(actors["hod"], second.id, True, None, db)

        db.refresh(request)
        db.refresh(general_fund)
        assert request.status == "pending_head_of_department_approval"
        assert general_fund.current_balance == Decimal("100.00")

        general_fund.current_balance = Decimal("300.00")
        db.commit()
        assert workflow.decide(actors["hod"], second.id, True, None, db) == "approved"
        db.refresh(general_fund)
        assert general_fund.current_balance == Decimal("0.00")
