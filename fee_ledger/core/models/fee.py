"""Fee type catalog (tuition, canteen, transport, ...): default price per category of charge."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Text, Uuid

from fee_ledger.db.session import Base


class FeeType(Base):
    """Catalog entry. Invoices copy the amount at creation; editing it never touches existing invoices."""

    __tablename__ = "fees"
    __table_args__ = (
        CheckConstraint(
            "type IN ('tuition','canteen','transport','exam','material','other')",
            name="chk_fee_type",
        ),
        CheckConstraint("amount >= 0", name="chk_fee_amount_non_negative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
