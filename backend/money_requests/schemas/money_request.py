from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from money_requests.models.enums import Priority
from money_requests.schemas.approval import ApprovalStepResponse


class MoneyRequestCreate(BaseModel):
    requesting_department_id: int
    fund_type_id: int
    amount: Decimal
    purpose: str
    suggested_vendor: Optional[str] = None
    associated_project: Optional[str] = None
    budget_code: Optional[str] = None
    priority: Priority = Priority.MEDIUM


class MoneyRequestUpdate(BaseModel):
    requesting_department_id: Optional[int] = None
    fund_type_id: Optional[int] = None
    amount: Optional[Decimal] = None
    purpose: Optional[str] = None
    suggested_vendor: Optional[str] = None
    associated_project: Optional[str] = None
    budget_code: Optional[str] = None
    priority: Optional[Priority] = None


class MoneyRequestFilters(BaseModel):
    """Read-side filters for listing money requests"""
    requester_id: Optional[int] = None
    department_id: Optional[int] = None
    status: List[str] = Field(default_factory=list)
    priority: List[Priority] = Field(default_factory=list)
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search_term: Optional[str] = None
    skip: int = 0
    limit: int = 100


class MoneyRequestResponse(BaseModel):
    id: int
    requester_id: int
    requesting_department_id: int
    fund_type_id: int
    amount: Decimal
    purpose: str
    suggested_vendor: Optional[str]
    associated_project: Optional[str]
    budget_code: Optional[str]
    priority: Priority
    status: str
    approval_template_id: Optional[int]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class MoneyRequestDetailResponse(MoneyRequestResponse):
    department_name: Optional[str] = None
    fund_name: Optional[str] = None
    requester_name: Optional[str] = None
    approval_chain: List[ApprovalStepResponse] = []
    current_step_id: Optional[int] = None


class StatusHistoryResponse(BaseModel):
    id: int
    old_status: Optional[str]
    new_status: str
    changed_by: Optional[int]
    reason: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)
    is_internal: bool = False


class CommentResponse(BaseModel):
    id: int
    money_request_id: int
    user_id: int
    comment: str
    is_internal: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
