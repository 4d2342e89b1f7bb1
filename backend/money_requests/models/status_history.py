from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from money_requests.database import Base


class StatusHistoryEntry(Base):
    __tablename__ = "money_request_status_history"

    id = Column(Integer, primary_key=True, index=True)
    money_request_id = Column(Integer, ForeignKey("money_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    old_status = Column(String(64), nullable=True)
    new_status = Column(String(64), nullable=False)
    changed_by = Column(Integer, ForeignKey("profiles.id"), nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    money_request = relationship("MoneyRequest", back_populates="status_history")
