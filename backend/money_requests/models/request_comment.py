from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from money_requests.database import Base


class RequestComment(Base):
    __tablename__ = "money_request_comments"

    id = Column(Integer, primary_key=True, index=True)
    money_request_id = Column(Integer, ForeignKey("money_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    comment = Column(Text, nullable=False)
    is_internal = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    money_request = relationship("MoneyRequest", back_populates="comments")
    user = relationship("UserProfile")
