from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from money_requests.database import Base
from money_requests.models.enums import StepDecision


class ApprovalStep(Base):
    """One role-gated step in a money request's approval chain"""
    __tablename__ = "approval_steps"
    __table_args__ = (
        UniqueConstraint("money_request_id", "step_order", name="uq_approval_step_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    money_request_id = Column(Integer, ForeignKey("money_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    approver_role = Column(String(50), nullable=False, index=True)
    step_order = Column(Integer, nullable=False)  # 1-based, contiguous
    decision = Column(
        Enum(StepDecision, name="step_decision", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=StepDecision.PENDING,
        index=True,
    )
    pending_status = Column(String(64), nullable=False)  # Request status while this step is current
    decided_at = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=True)
    approver_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)  # Who actually decided

    # Relationships
    money_request = relationship("MoneyRequest", back_populates="approval_chain")
    approver = relationship("UserProfile", foreign_keys=[approver_id])
