"""Student fee (invoice): an amount owed by one student, optionally derived from a fee type."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from fee_ledger.core.enums import InvoiceStatus
from fee_ledger.db.session import Base


class StudentFee(Base):
    """
    Invoice assigned to a student.
    paid_amount is only ever moved by an atomic increment when a payment is recorded,
    and never exceeds amount.
    """

    __tablename__ = "student_fees"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','partial','paid','overdue')",
            name="chk_student_fee_status",
        ),
        CheckConstraint(
            "paid_amount >= 0 AND paid_amount <= amount",
            name="chk_student_fee_paid_amount",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fee_id = Column(Uuid(as_uuid=True), ForeignKey("fees.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=InvoiceStatus.pending.value, index=True)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("User", foreign_keys=[student_id])
    fee = relationship("FeeType")
