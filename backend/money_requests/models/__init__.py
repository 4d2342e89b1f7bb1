from money_requests.models.department import Department
from money_requests.models.user_profile import UserProfile
from money_requests.models.fund_type import FundType
from money_requests.models.approval_template import ApprovalTemplate
from money_requests.models.money_request import MoneyRequest
from money_requests.models.approval_step import ApprovalStep
from money_requests.models.status_history import StatusHistoryEntry
from money_requests.models.request_comment import RequestComment

__all__ = ["Department", "UserProfile", "FundType", "ApprovalTemplate", "MoneyRequest", "ApprovalStep", "StatusHistoryEntry", "RequestComment"]
