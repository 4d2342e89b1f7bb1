from enum import Enum


class StepDecision(str, Enum):
    """Decision recorded on a single approval step"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RequestStatus(str, Enum):
    """
    Fixed request statuses.

    While a request is in its approval chain its status is the pending status
    stored on the current step (e.g. pending_treasurer_approval), which is not
    a member of this enum.
    """
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


PRE_CHAIN_STATUSES = {RequestStatus.DRAFT.value, RequestStatus.SUBMITTED.value}
TERMINAL_STATUSES = {RequestStatus.APPROVED.value, RequestStatus.REJECTED.value, RequestStatus.PAID.value}


def is_pending_status(status: str) -> bool:
    return status not in PRE_CHAIN_STATUSES and status not in TERMINAL_STATUSES
