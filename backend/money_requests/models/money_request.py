from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from money_requests.database import Base
from money_requests.models.enums import Priority, RequestStatus


class MoneyRequest(Base):
    __tablename__ = "money_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    requesting_department_id = Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    fund_type_id = Column(Integer, ForeignKey("fund_types.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    purpose = Column(Text, nullable=False)
    suggested_vendor = Column(String, nullable=True)
    associated_project = Column(String, nullable=True)
    budget_code = Column(String, nullable=True)
    priority = Column(
        Enum(Priority, name="request_priority", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Priority.MEDIUM,
        index=True,
    )
    # draft, submitted, <step pending status>, approved, rejected, paid
    status = Column(String(64), nullable=False, default=RequestStatus.DRAFT.value, index=True)
    approval_template_id = Column(Integer, ForeignKey("approval_templates.id"), nullable=True)
    request_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    requester = relationship("UserProfile", foreign_keys=[requester_id])
    requesting_department = relationship("Department", back_populates="money_requests")
    fund_type = relationship("FundType", back_populates="money_requests")
    approval_template = relationship("ApprovalTemplate")
    approval_chain = relationship(
        "ApprovalStep",
        back_populates="money_request",
        cascade="all, delete-orphan",
        order_by="ApprovalStep.step_order",
    )
    status_history = relationship(
        "StatusHistoryEntry",
        back_populates="money_request",
        cascade="all, delete-orphan",
        order_by="StatusHistoryEntry.id",
    )
    comments = relationship(
        "RequestComment",
        back_populates="money_request",
        cascade="all, delete-orphan",
        order_by="RequestComment.id",
    )
