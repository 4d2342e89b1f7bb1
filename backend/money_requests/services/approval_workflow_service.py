"""
Approval Workflow Service - owns a money request's lifecycle.

Builds the approval chain on submission, gates decisions to the current step,
derives the request status from the chain and debits the fund on final
approval. Every mutating operation is a single transaction: it commits once
at the end or rolls back entirely.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from money_requests.config import settings
from money_requests.database import commit_or_rollback
from money_requests.exceptions import (
    InvalidAmount,
    InvalidPurpose,
    InvalidTransition,
    NotAuthorized,
    NotAuthorizedToDecide,
    RequestNotFound,
    StepAlreadyDecided,
    StepNotFound,
    WorkflowError,
)
from money_requests.models.approval_step import ApprovalStep
from money_requests.models.enums import (
    PRE_CHAIN_STATUSES,
    RequestStatus,
    StepDecision,
    is_pending_status,
)
from money_requests.models.money_request import MoneyRequest
from money_requests.models.request_comment import RequestComment
from money_requests.models.status_history import StatusHistoryEntry
from money_requests.schemas.money_request import MoneyRequestCreate, MoneyRequestUpdate
from money_requests.services.directory_service import ActingUser, directory_service
from money_requests.services.fund_service import fund_service
from money_requests.services.template_service import template_service
from money_requests.utils.clock import utcnow

logger = logging.getLogger(__name__)


def find_current_step(steps: List[ApprovalStep]) -> Optional[ApprovalStep]:
    """
    The step eligible to act now: the lowest-order pending step.

    None when every step is decided, or when an earlier step was rejected
    (later steps stay pending but never become current).
    """
    for step in sorted(steps, key=lambda s: s.step_order):
        if step.decision == StepDecision.REJECTED:
            return None
        if step.decision == StepDecision.PENDING:
            return step
    return None


AMOUNT_DECIMAL_PLACES = 2
AMOUNT_LIMIT = Decimal(10) ** 10  # Numeric(12, 2)


def validate_amount(amount) -> Decimal:
    """Positive amount that fits money_requests.amount exactly, without rounding"""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Amount '{amount}' is not a number")
    if not value.is_finite() or value <= 0:
        raise InvalidAmount(f"Amount must be positive, got {amount}")
    if value.normalize().as_tuple().exponent < -AMOUNT_DECIMAL_PLACES:
        raise InvalidAmount(f"Amount must have at most {AMOUNT_DECIMAL_PLACES} decimal places, got {amount}")
    if value >= AMOUNT_LIMIT:
        raise InvalidAmount(f"Amount must be less than {AMOUNT_LIMIT:,}, got {amount}")
    return value


def validate_purpose(purpose: Optional[str]) -> str:
    if purpose is None or not purpose.strip():
        raise InvalidPurpose("Purpose must not be empty")
    return purpose.strip()


class ApprovalWorkflowService:
    """Service for the money request approval workflow"""

    # ------------------------------------------------------------------
    # Request lifecycle
    # ------------------------------------------------------------------

    def get_request(self, request_id: int, db: Session) -> MoneyRequest:
        request = db.query(MoneyRequest).filter(MoneyRequest.id == request_id).first()
        if not request:
            raise RequestNotFound(f"Money request {request_id} not found")
        return request

    def create_request(self, acting_user: ActingUser, data: MoneyRequestCreate, db: Session) -> MoneyRequest:
        """Create a draft money request owned by the acting user"""
        amount = validate_amount(data.amount)
        purpose = validate_purpose(data.purpose)
        directory_service.get_department(data.requesting_department_id, db)
        directory_service.get_fund(data.fund_type_id, db)

        request = MoneyRequest(
            requester_id=acting_user.id,
            requesting_department_id=data.requesting_department_id,
            fund_type_id=data.fund_type_id,
            amount=amount,
            purpose=purpose,
            suggested_vendor=data.suggested_vendor,
            associated_project=data.associated_project,
            budget_code=data.budget_code,
            priority=data.priority,
            status=RequestStatus.DRAFT.value
        )
        db.add(request)
        try:
            db.flush()
            self._append_history(request, None, RequestStatus.DRAFT.value, acting_user.id, "Request created", db)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(request)

        logger.info(f"User {acting_user.id} created money request {request.id} for {amount}")
        return request

    def update_request(self, acting_user: ActingUser, request_id: int, changes: MoneyRequestUpdate, db: Session) -> MoneyRequest:
        """Edit a draft; only its requester or an override role may do so"""
        request = self.get_request(request_id, db)
        if request.status != RequestStatus.DRAFT.value:
            raise InvalidTransition(f"Only draft requests can be edited (status: {request.status})")
        if not self._is_owner_or_override(acting_user, request):
            raise NotAuthorized(f"User {acting_user.id} may not edit request {request_id}")

        fields = changes.model_dump(exclude_unset=True)
        if "amount" in fields:
            fields["amount"] = validate_amount(fields["amount"])
        if "purpose" in fields:
            fields["purpose"] = validate_purpose(fields["purpose"])
        if fields.get("requesting_department_id") is not None:
            directory_service.get_department(fields["requesting_department_id"], db)
        if fields.get("fund_type_id") is not None:
            directory_service.get_fund(fields["fund_type_id"], db)

        for field, value in fields.items():
            if value is None and field in ("requesting_department_id", "fund_type_id", "priority"):
                continue
            setattr(request, field, value)

        commit_or_rollback(db)
        db.refresh(request)
        logger.info(f"User {acting_user.id} updated draft request {request.id}")
        return request

    def delete_request(self, acting_user: ActingUser, request_id: int, db: Session) -> None:
        """
        Delete a request that has not entered its approval chain.

        The requester may delete their own draft; delete roles may delete any
        draft or submitted request.
        """
        request = self.get_request(request_id, db)
        if request.status not in PRE_CHAIN_STATUSES or request.approval_chain:
            raise InvalidTransition(f"Request {request_id} can no longer be deleted (status: {request.status})")

        is_owner_draft = request.requester_id == acting_user.id and request.status == RequestStatus.DRAFT.value
        if not is_owner_draft and acting_user.role not in settings.delete_role_set:
            raise NotAuthorized(f"User {acting_user.id} may not delete request {request_id}")

        db.delete(request)
        commit_or_rollback(db)
        logger.info(f"User {acting_user.id} deleted money request {request_id}")

    def mark_paid(self, acting_user: ActingUser, request_id: int, db: Session) -> MoneyRequest:
        """Explicit approved -> paid transition; never inferred by the workflow"""
        request = self.get_request(request_id, db)
        if acting_user.role not in settings.payment_role_set:
            raise NotAuthorized(f"User {acting_user.id} may not mark requests as paid")
        if request.status != RequestStatus.APPROVED.value:
            raise InvalidTransition(f"Only approved requests can be marked paid (status: {request.status})")

        try:
            self._change_status(request, RequestStatus.PAID.value, acting_user.id, "Marked as paid", db)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(request)
        return request

    # ------------------------------------------------------------------
    # Chain construction
    # ------------------------------------------------------------------

    def submit_request(self, acting_user: ActingUser, request_id: int, db: Session) -> MoneyRequest:
        """
        Build the approval chain for a draft request.

        Selects the template for the request's department and amount, creates
        one pending step per template role and moves the request to the first
        step's pending status. Either all of this is committed or none of it;
        on NoTemplateFound the request stays in draft.
        """
        request = self.get_request(request_id, db)
        if not self._is_owner_or_override(acting_user, request):
            raise NotAuthorized(f"User {acting_user.id} may not submit request {request_id}")
        if request.status not in PRE_CHAIN_STATUSES or request.approval_chain:
            raise InvalidTransition(f"Request {request_id} is already in its approval chain (status: {request.status})")

        amount = validate_amount(request.amount)
        validate_purpose(request.purpose)

        template = template_service.select_template(request.requesting_department_id, amount, db)
        steps = template_service.build_chain(template, utcnow())

        try:
            request.approval_chain.extend(steps)
            request.approval_template_id = template.id
            self._change_status(
                request,
                steps[0].pending_status,
                acting_user.id,
                f"Submitted for approval using template '{template.name}'",
                db
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Building approval chain for request {request_id} failed", exc_info=True)
            raise
        db.refresh(request)

        logger.info(
            f"Request {request.id} submitted: {len(steps)} step chain "
            f"{[s.approver_role for s in steps]}, status {request.status}"
        )
        return request

    # ------------------------------------------------------------------
    # Step gating
    # ------------------------------------------------------------------

    def list_steps(self, request_id: int, db: Session) -> List[ApprovalStep]:
        self.get_request(request_id, db)
        return db.query(ApprovalStep).filter(
            ApprovalStep.money_request_id == request_id
        ).order_by(ApprovalStep.step_order).all()

    def current_step(self, request_id: int, db: Session) -> Optional[ApprovalStep]:
        return find_current_step(self.list_steps(request_id, db))

    def can_decide(self, acting_user: ActingUser, request: MoneyRequest, step: ApprovalStep) -> bool:
        """
        True iff the step is the request's current step, still pending, and the
        user holds the step's approver role or an override role.
        """
        if step.decision != StepDecision.PENDING:
            return False
        if not is_pending_status(request.status):
            return False

        current = find_current_step(request.approval_chain)
        if current is None or current.id != step.id:
            return False

        if not acting_user.role:
            return False
        return acting_user.role == step.approver_role or directory_service.has_override_role(acting_user.role)

    def can_user_decide(self, user_id: int, request_id: int, db: Session) -> bool:
        """Whether the user may decide the request's current step right now"""
        acting_user = directory_service.resolve_acting_user(user_id, db)
        request = self.get_request(request_id, db)
        current = find_current_step(request.approval_chain)
        if current is None:
            return False
        return self.can_decide(acting_user, request, current)

    # ------------------------------------------------------------------
    # Decision recording
    # ------------------------------------------------------------------

    def decide(
        self,
        acting_user: ActingUser,
        step_id: int,
        approved: bool,
        comment: Optional[str],
        db: Session
    ) -> str:
        """
        Record an approve/reject decision on a step and advance the request.

        - rejected: request becomes rejected; remaining steps stay pending
        - approved, last step: request becomes approved and the fund is debited
        - approved, more steps: request moves to the next step's pending status

        The step decision, status change, history entry and fund debit are
        committed together.

        Returns:
            The request's new status

        Raises:
            StepNotFound, StepAlreadyDecided, NotAuthorizedToDecide, FundDebitFailed
        """
        step = db.query(ApprovalStep).filter(ApprovalStep.id == step_id).first()
        if not step:
            raise StepNotFound(f"Approval step {step_id} not found")
        request = step.money_request

        if step.decision != StepDecision.PENDING:
            raise StepAlreadyDecided(f"Step {step_id} was already {step.decision.value}")
        if not self.can_decide(acting_user, request, step):
            logger.warning(
                f"User {acting_user.id} (role {acting_user.role}) not allowed to decide step {step_id} "
                f"({step.approver_role}) of request {request.id}"
            )
            raise NotAuthorizedToDecide(
                f"User {acting_user.id} may not decide step {step.step_order} ({step.approver_role}) of request {request.id}"
            )

        decision = StepDecision.APPROVED if approved else StepDecision.REJECTED

        try:
            # Conditional on the step still being pending; the loser of a race updates nothing
            updated = db.query(ApprovalStep).filter(
                ApprovalStep.id == step.id,
                ApprovalStep.decision == StepDecision.PENDING
            ).update({
                ApprovalStep.decision: decision,
                ApprovalStep.decided_at: utcnow(),
                ApprovalStep.approver_id: acting_user.id,
                ApprovalStep.comments: comment
            }, synchronize_session=False)
            if updated == 0:
                raise StepAlreadyDecided(f"Step {step_id} was decided concurrently")
            db.refresh(step)

            if decision == StepDecision.REJECTED:
                new_status = RequestStatus.REJECTED.value
                reason = f"Rejected at step {step.step_order} ({step.approver_role})"
            else:
                next_step = self._next_step(request, step)
                if next_step is None:
                    new_status = RequestStatus.APPROVED.value
                    reason = f"Final approval at step {step.step_order} ({step.approver_role})"
                    fund_service.debit_fund(request.fund_type_id, request.amount, db)
                else:
                    new_status = next_step.pending_status
                    reason = f"Approved at step {step.step_order} ({step.approver_role})"

            self._change_status(request, new_status, acting_user.id, reason, db)
            db.commit()
        except WorkflowError:
            db.rollback()
            raise
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"Recording decision on step {step_id} failed; rolled back", exc_info=True)
            raise

        logger.info(
            f"User {acting_user.id} {decision.value} step {step.step_order} of request {request.id}; "
            f"status now {new_status}"
        )
        return new_status

    def _next_step(self, request: MoneyRequest, step: ApprovalStep) -> Optional[ApprovalStep]:
        later = [s for s in request.approval_chain if s.step_order > step.step_order]
        return min(later, key=lambda s: s.step_order) if later else None

    # ------------------------------------------------------------------
    # Comments & history
    # ------------------------------------------------------------------

    def add_comment(self, acting_user: ActingUser, request_id: int, comment: str, is_internal: bool, db: Session) -> RequestComment:
        self.get_request(request_id, db)
        if not comment or not comment.strip():
            raise WorkflowError("Comment must not be empty")

        entry = RequestComment(
            money_request_id=request_id,
            user_id=acting_user.id,
            comment=comment.strip(),
            is_internal=is_internal
        )
        db.add(entry)
        commit_or_rollback(db)
        db.refresh(entry)
        return entry

    def list_comments(self, request_id: int, db: Session, include_internal: bool = True) -> List[RequestComment]:
        self.get_request(request_id, db)
        query = db.query(RequestComment).filter(RequestComment.money_request_id == request_id)
        if not include_internal:
            query = query.filter(RequestComment.is_internal.is_(False))
        return query.order_by(RequestComment.id).all()

    def status_history(self, request_id: int, db: Session) -> List[StatusHistoryEntry]:
        self.get_request(request_id, db)
        return db.query(StatusHistoryEntry).filter(
            StatusHistoryEntry.money_request_id == request_id
        ).order_by(StatusHistoryEntry.id).all()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_owner_or_override(self, acting_user: ActingUser, request: MoneyRequest) -> bool:
        return request.requester_id == acting_user.id or directory_service.has_override_role(acting_user.role)

    def _change_status(self, request: MoneyRequest, new_status: str, changed_by: Optional[int], reason: str, db: Session) -> None:
        old_status = request.status
        request.status = new_status
        self._append_history(request, old_status, new_status, changed_by, reason, db)

    def _append_history(
        self,
        request: MoneyRequest,
        old_status: Optional[str],
        new_status: str,
        changed_by: Optional[int],
        reason: Optional[str],
        db: Session
    ) -> None:
        db.add(StatusHistoryEntry(
            money_request_id=request.id,
            old_status=old_status,
            new_status=new_status,
            changed_by=changed_by,
            reason=reason
        ))


# Singleton instance
approval_workflow_service = ApprovalWorkflowService()
