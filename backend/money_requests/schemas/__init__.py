from money_requests.schemas.money_request import (
    MoneyRequestCreate,
    MoneyRequestUpdate,
    MoneyRequestFilters,
    MoneyRequestResponse,
    MoneyRequestDetailResponse,
)
from money_requests.schemas.approval import (
    ApprovalStepResponse,
    DecisionCreate,
    ApprovalTemplateCreate,
    ApprovalTemplateResponse,
)
from money_requests.schemas.fund_type import FundTypeResponse

__all__ = [
    "MoneyRequestCreate",
    "MoneyRequestUpdate",
    "MoneyRequestFilters",
    "MoneyRequestResponse",
    "MoneyRequestDetailResponse",
    "ApprovalStepResponse",
    "DecisionCreate",
    "ApprovalTemplateCreate",
    "ApprovalTemplateResponse",
    "FundTypeResponse",
]
