from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from money_requests.models.enums import StepDecision


class ApprovalStepResponse(BaseModel):
    id: int
    money_request_id: int
    approver_role: str
    step_order: int
    decision: StepDecision
    pending_status: str
    decided_at: Optional[datetime]
    comments: Optional[str]
    due_date: Optional[datetime]
    approver_id: Optional[int]
    is_overdue: bool = False

    class Config:
        from_attributes = True


class DecisionCreate(BaseModel):
    approved: bool
    comment: Optional[str] = None


class DecisionResponse(BaseModel):
    step_id: int
    money_request_id: int
    decision: StepDecision
    status: str


class CanDecideResponse(BaseModel):
    money_request_id: int
    step_id: Optional[int]
    can_decide: bool


class TemplateStep(BaseModel):
    role: str
    timeout_hours: Optional[int] = Field(None, ge=1)


class ApprovalTemplateCreate(BaseModel):
    name: str
    description: Optional[str] = None
    department_id: Optional[int] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    approval_steps: List[TemplateStep]
    is_default: bool = False


class ApprovalTemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    department_id: Optional[int] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    approval_steps: Optional[List[TemplateStep]] = None


class ApprovalTemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    department_id: Optional[int]
    min_amount: Optional[Decimal]
    max_amount: Optional[Decimal]
    approval_steps: List[TemplateStep]
    is_default: bool
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
