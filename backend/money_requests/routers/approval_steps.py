from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from money_requests.database import get_db
from money_requests.deps import get_acting_user
from money_requests.models.approval_step import ApprovalStep
from money_requests.schemas.approval import DecisionCreate, DecisionResponse
from money_requests.services.approval_workflow_service import approval_workflow_service
from money_requests.services.directory_service import ActingUser

router = APIRouter(prefix="/api/approval-steps", tags=["approval-steps"])


@router.post("/{step_id}/decision", response_model=DecisionResponse)
def decide_step(
    step_id: int,
    decision: DecisionCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Approve or reject an approval step"""
    new_status = approval_workflow_service.decide(
        acting_user, step_id, decision.approved, decision.comment, db
    )
    step = db.query(ApprovalStep).filter(ApprovalStep.id == step_id).first()
    return DecisionResponse(
        step_id=step.id,
        money_request_id=step.money_request_id,
        decision=step.decision,
        status=new_status
    )
