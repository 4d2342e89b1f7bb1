"""
Request Query Service - read-side projections over money requests.
Nothing here mutates state.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from money_requests.models.approval_step import ApprovalStep
from money_requests.models.enums import PRE_CHAIN_STATUSES, TERMINAL_STATUSES, StepDecision
from money_requests.models.money_request import MoneyRequest
from money_requests.schemas.money_request import MoneyRequestFilters
from money_requests.services.approval_workflow_service import find_current_step
from money_requests.services.directory_service import ActingUser, directory_service
from money_requests.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def is_overdue(step: ApprovalStep, now: Optional[datetime] = None) -> bool:
    """A pending step past its due date"""
    if step.due_date is None or step.decision != StepDecision.PENDING:
        return False
    return as_utc(now or utcnow()) > as_utc(step.due_date)


class RequestQueryService:
    """Filtering and approval-queue views over money requests"""

    def list_requests(self, filters: MoneyRequestFilters, db: Session) -> List[MoneyRequest]:
        query = db.query(MoneyRequest)

        if filters.requester_id is not None:
            query = query.filter(MoneyRequest.requester_id == filters.requester_id)
        if filters.department_id is not None:
            query = query.filter(MoneyRequest.requesting_department_id == filters.department_id)
        if filters.status:
            query = query.filter(MoneyRequest.status.in_(filters.status))
        if filters.priority:
            query = query.filter(MoneyRequest.priority.in_(filters.priority))
        if filters.min_amount is not None:
            query = query.filter(MoneyRequest.amount >= filters.min_amount)
        if filters.max_amount is not None:
            query = query.filter(MoneyRequest.amount <= filters.max_amount)
        if filters.start_date is not None:
            query = query.filter(MoneyRequest.created_at >= filters.start_date)
        if filters.end_date is not None:
            query = query.filter(MoneyRequest.created_at <= filters.end_date)
        if filters.search_term and filters.search_term.strip():
            pattern = f"%{filters.search_term.strip()}%"
            query = query.filter(or_(
                MoneyRequest.purpose.ilike(pattern),
                MoneyRequest.suggested_vendor.ilike(pattern),
                MoneyRequest.associated_project.ilike(pattern)
            ))

        return query.order_by(
            MoneyRequest.created_at.desc(),
            MoneyRequest.id.desc()
        ).offset(filters.skip).limit(filters.limit).all()

    def pending_for_user(self, acting_user: ActingUser, db: Session) -> List[MoneyRequest]:
        """
        Requests awaiting the user's decision.

        A request qualifies when its current step's approver role is the
        user's role; override roles see every request with a current step.
        """
        if not acting_user.role:
            return []

        override = directory_service.has_override_role(acting_user.role)
        query = db.query(MoneyRequest).options(
            selectinload(MoneyRequest.approval_chain)
        ).filter(
            MoneyRequest.status.notin_(sorted(PRE_CHAIN_STATUSES | TERMINAL_STATUSES))
        )
        if not override:
            query = query.filter(MoneyRequest.approval_chain.any(
                (ApprovalStep.approver_role == acting_user.role) &
                (ApprovalStep.decision == StepDecision.PENDING)
            ))

        pending = []
        for request in query.order_by(MoneyRequest.created_at.asc(), MoneyRequest.id.asc()).all():
            current = find_current_step(request.approval_chain)
            if current is None:
                continue
            if override or current.approver_role == acting_user.role:
                pending.append(request)

        logger.info(f"{len(pending)} requests pending approval for user {acting_user.id} ({acting_user.role})")
        return pending

    def overdue_steps(self, db: Session, now: Optional[datetime] = None) -> List[ApprovalStep]:
        """Current steps whose due date has passed"""
        now = now or utcnow()
        candidates = db.query(ApprovalStep).filter(
            ApprovalStep.decision == StepDecision.PENDING,
            ApprovalStep.due_date.isnot(None)
        ).all()

        overdue = []
        for step in candidates:
            if not is_overdue(step, now):
                continue
            current = find_current_step(step.money_request.approval_chain)
            if current is not None and current.id == step.id:
                overdue.append(step)
        return sorted(overdue, key=lambda s: as_utc(s.due_date))


# Singleton instance
request_query_service = RequestQueryService()
