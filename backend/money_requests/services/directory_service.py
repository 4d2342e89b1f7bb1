"""
Directory Service - resolves users, roles, departments and funds for the workflow.
"""
import logging
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from money_requests.config import settings
from money_requests.exceptions import ReferenceNotFound, UnknownUser
from money_requests.models.department import Department
from money_requests.models.fund_type import FundType
from money_requests.models.user_profile import UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActingUser:
    """The user performing an operation, passed explicitly into every workflow call"""
    id: int
    role: Optional[str] = None


class DirectoryService:
    """Lookups against the department/fund/user directory"""

    def get_user_role(self, user_id: int, db: Session) -> Optional[str]:
        profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
        return profile.role if profile else None

    def has_override_role(self, role: Optional[str]) -> bool:
        """Override roles may act on any approval step"""
        return bool(role) and role in settings.override_role_set

    def resolve_acting_user(self, user_id: int, db: Session) -> ActingUser:
        profile = db.query(UserProfile).filter(UserProfile.id == user_id).first()
        if not profile:
            logger.warning(f"Unknown acting user {user_id}")
            raise UnknownUser(f"User {user_id} not found")
        return ActingUser(id=profile.id, role=profile.role)

    def get_department(self, department_id: int, db: Session) -> Department:
        department = db.query(Department).filter(Department.id == department_id).first()
        if not department:
            raise ReferenceNotFound(f"Department {department_id} not found")
        return department

    def get_fund(self, fund_type_id: int, db: Session) -> FundType:
        fund = db.query(FundType).filter(FundType.id == fund_type_id).first()
        if not fund:
            raise ReferenceNotFound(f"Fund type {fund_type_id} not found")
        return fund


# Singleton instance
directory_service = DirectoryService()
