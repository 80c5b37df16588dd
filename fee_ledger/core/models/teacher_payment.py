"""Teacher payment: salary paid to a teacher for a period."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from fee_ledger.core.enums import TeacherPaymentStatus
from fee_ledger.db.session import Base


class TeacherPayment(Base):
    __tablename__ = "teacher_payments"
    __table_args__ = (
        CheckConstraint(
            "payment_method IN ('cash','transfer','mobile_money','check','other')",
            name="chk_teacher_payment_method",
        ),
        CheckConstraint("status IN ('pending','paid')", name="chk_teacher_payment_status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    payment_method = Column(String(50), nullable=False)
    reference = Column(String(100), nullable=True)
    period_month = Column(String(20), nullable=False)  # e.g. "2025-10" or "October"
    period_year = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=TeacherPaymentStatus.paid.value)
    notes = Column(Text, nullable=True)
    recorded_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    teacher = relationship("User", foreign_keys=[teacher_id])
