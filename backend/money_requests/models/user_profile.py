from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from money_requests.database import Base


class UserProfile(Base):
    """Directory entry for a church user and the role used for approval gating"""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, unique=True, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String(50), nullable=True, index=True)  # administrator, treasurer, head_of_department, ...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def display_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email
