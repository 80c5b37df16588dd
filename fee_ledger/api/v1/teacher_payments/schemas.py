"""Teacher payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fee_ledger.core.enums import PaymentMethod, TeacherPaymentStatus


class TeacherPaymentFilter(BaseModel):
    teacher_id: Optional[UUID] = None
    month: Optional[str] = None
    year: Optional[int] = None


class TeacherPaymentCreate(BaseModel):
    teacher_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod
    period_month: str = Field(..., min_length=1, max_length=20, description='e.g. "2025-10" or "October"')
    period_year: int = Field(..., ge=2000, le=2100)
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class TeacherPaymentResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    amount: Decimal
    payment_method: PaymentMethod
    reference: Optional[str] = None
    period_month: str
    period_year: int
    status: TeacherPaymentStatus
    notes: Optional[str] = None
    recorded_by: Optional[UUID] = None
    payment_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True


class TeacherPaymentView(TeacherPaymentResponse):
    teacher_name: Optional[str] = None
    teacher_email: Optional[str] = None
