"""
Money requests API router - request lifecycle, approval chain read-outs,
comments and status history.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from money_requests.database import get_db
from money_requests.deps import get_acting_user
from money_requests.models.enums import Priority
from money_requests.models.money_request import MoneyRequest
from money_requests.schemas.approval import ApprovalStepResponse, CanDecideResponse
from money_requests.schemas.money_request import (
    CommentCreate,
    CommentResponse,
    MoneyRequestCreate,
    MoneyRequestDetailResponse,
    MoneyRequestFilters,
    MoneyRequestResponse,
    MoneyRequestUpdate,
    StatusHistoryResponse
)
from money_requests.services.approval_workflow_service import approval_workflow_service, find_current_step
from money_requests.services.directory_service import ActingUser
from money_requests.services.request_query_service import is_overdue, request_query_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/money-requests", tags=["money-requests"])


def step_response(step) -> ApprovalStepResponse:
    response = ApprovalStepResponse.model_validate(step)
    response.is_overdue = is_overdue(step)
    return response


def detail_response(request: MoneyRequest) -> MoneyRequestDetailResponse:
    current = find_current_step(request.approval_chain)
    return MoneyRequestDetailResponse(
        **MoneyRequestResponse.model_validate(request).model_dump(),
        department_name=request.requesting_department.name if request.requesting_department else None,
        fund_name=request.fund_type.name if request.fund_type else None,
        requester_name=request.requester.display_name if request.requester else None,
        approval_chain=[step_response(step) for step in request.approval_chain],
        current_step_id=current.id if current else None
    )


@router.get("", response_model=List[MoneyRequestResponse])
def list_money_requests(
    requester_id: Optional[int] = Query(None, description="Filter by requester"),
    department_id: Optional[int] = Query(None, description="Filter by requesting department"),
    status: Optional[List[str]] = Query(None, description="Filter by one or more statuses"),
    priority: Optional[List[Priority]] = Query(None, description="Filter by one or more priorities"),
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None, description="Search purpose, vendor and project"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """List money requests with optional filters, newest first"""
    filters = MoneyRequestFilters(
        requester_id=requester_id,
        department_id=department_id,
        status=status or [],
        priority=priority or [],
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
        search_term=search,
        skip=skip,
        limit=limit
    )
    return request_query_service.list_requests(filters, db)


@router.get("/pending-approvals", response_model=List[MoneyRequestDetailResponse])
def list_pending_approvals(
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Requests whose current step awaits the calling user"""
    return [detail_response(r) for r in request_query_service.pending_for_user(acting_user, db)]


@router.get("/overdue-steps", response_model=List[ApprovalStepResponse])
def list_overdue_steps(db: Session = Depends(get_db)):
    """Current approval steps past their due date"""
    return [step_response(step) for step in request_query_service.overdue_steps(db)]


@router.post("", response_model=MoneyRequestResponse, status_code=201)
def create_money_request(
    data: MoneyRequestCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Create a draft money request"""
    return approval_workflow_service.create_request(acting_user, data, db)


@router.get("/{request_id}", response_model=MoneyRequestDetailResponse)
def get_money_request(request_id: int, db: Session = Depends(get_db)):
    """Get a money request with its approval chain"""
    return detail_response(approval_workflow_service.get_request(request_id, db))


@router.patch("/{request_id}", response_model=MoneyRequestResponse)
def update_money_request(
    request_id: int,
    changes: MoneyRequestUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Edit a draft money request"""
    return approval_workflow_service.update_request(acting_user, request_id, changes, db)


@router.delete("/{request_id}", status_code=204)
def delete_money_request(
    request_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    approval_workflow_service.delete_request(acting_user, request_id, db)
    return Response(status_code=204)


@router.post("/{request_id}/submit", response_model=MoneyRequestDetailResponse)
def submit_money_request(
    request_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Build the approval chain and start the workflow"""
    request = approval_workflow_service.submit_request(acting_user, request_id, db)
    return detail_response(request)


@router.post("/{request_id}/mark-paid", response_model=MoneyRequestResponse)
def mark_money_request_paid(
    request_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    return approval_workflow_service.mark_paid(acting_user, request_id, db)


@router.get("/{request_id}/steps", response_model=List[ApprovalStepResponse])
def list_approval_steps(request_id: int, db: Session = Depends(get_db)):
    """Approval chain ordered by step"""
    return [step_response(step) for step in approval_workflow_service.list_steps(request_id, db)]


@router.get("/{request_id}/current-step", response_model=Optional[ApprovalStepResponse])
def get_current_step(request_id: int, db: Session = Depends(get_db)):
    step = approval_workflow_service.current_step(request_id, db)
    return step_response(step) if step else None


@router.get("/{request_id}/can-decide", response_model=CanDecideResponse)
def can_decide(
    request_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Whether the calling user may decide the current step"""
    step = approval_workflow_service.current_step(request_id, db)
    return CanDecideResponse(
        money_request_id=request_id,
        step_id=step.id if step else None,
        can_decide=approval_workflow_service.can_user_decide(acting_user.id, request_id, db)
    )


@router.get("/{request_id}/history", response_model=List[StatusHistoryResponse])
def get_status_history(request_id: int, db: Session = Depends(get_db)):
    return approval_workflow_service.status_history(request_id, db)


@router.get("/{request_id}/comments", response_model=List[CommentResponse])
def list_comments(
    request_id: int,
    include_internal: bool = Query(True),
    db: Session = Depends(get_db)
):
    return approval_workflow_service.list_comments(request_id, db, include_internal=include_internal)


@router.post("/{request_id}/comments", response_model=CommentResponse, status_code=201)
def add_comment(
    request_id: int,
    data: CommentCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    return approval_workflow_service.add_comment(acting_user, request_id, data.comment, data.is_internal, db)
