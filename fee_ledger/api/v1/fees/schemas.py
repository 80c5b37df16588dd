"""Fee ledger schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from fee_ledger.core.enums import FeeCategory, InvoiceStatus, PaymentMethod


# --- Fee types ---
class FeeTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: FeeCategory
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None


class FeeTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[FeeCategory] = None
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None


class FeeTypeResponse(BaseModel):
    id: UUID
    name: str
    type: FeeCategory
    amount: Decimal
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# --- Invoices (student fees) ---
class InvoiceFilter(BaseModel):
    """Recognized list filters. status "all" or None means no status filter."""

    status: Optional[str] = None
    search: Optional[str] = None


class InvoiceCreate(BaseModel):
    student_id: UUID
    fee_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(
        None, gt=0, max_digits=10, decimal_places=2,
        description="Defaults to the fee type amount when fee_id is given",
    )
    due_date: Optional[date] = None


class StudentFeeResponse(BaseModel):
    id: UUID
    student_id: UUID
    fee_id: Optional[UUID] = None
    amount: Decimal
    paid_amount: Decimal
    status: InvoiceStatus
    due_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InvoiceView(BaseModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    class_name: Optional[str] = None
    fee_id: Optional[UUID] = None
    fee_type: Optional[str] = None
    amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: InvoiceStatus
    due_date: Optional[date] = None
    created_at: datetime


# --- Payments ---
class PaymentCreate(BaseModel):
    student_fee_id: UUID
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: PaymentMethod
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: UUID
    student_fee_id: UUID
    amount: Decimal
    payment_method: PaymentMethod
    reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RecordPaymentResponse(BaseModel):
    payment: PaymentResponse
    fee: StudentFeeResponse


# --- Stats ---
class FeeStats(BaseModel):
    total_expected: Decimal
    total_received: Decimal
    pending_count: int
    overdue_count: int
