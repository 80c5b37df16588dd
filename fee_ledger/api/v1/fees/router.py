"""Fees router: fee types, invoices, payments, stats."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.auth.rbac import FINANCE_READ_ROLES, FINANCE_WRITE_ROLES, require_roles
from fee_ledger.auth.schemas import CurrentUser
from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import (
    FeeStats,
    FeeTypeCreate,
    FeeTypeResponse,
    FeeTypeUpdate,
    InvoiceCreate,
    InvoiceFilter,
    InvoiceView,
    PaymentCreate,
    PaymentResponse,
    RecordPaymentResponse,
    StudentFeeResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Invoices ---
@router.get("/invoices", response_model=List[InvoiceView])
async def list_invoices(
    fee_status: Optional[str] = Query(
        None, alias="status", description="pending, partial, paid, overdue or all"
    ),
    search: Optional[str] = Query(None, description="Substring of student name or email"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> List[InvoiceView]:
    try:
        return await service.list_invoices(
            db,
            InvoiceFilter(status=fee_status, search=search),
            limit=limit,
            offset=offset,
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/invoices",
    response_model=StudentFeeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    payload: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> StudentFeeResponse:
    try:
        return await service.create_invoice(db, payload, created_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/invoices/{student_fee_id}", response_model=InvoiceView)
async def get_invoice(
    student_fee_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> InvoiceView:
    try:
        return await service.get_invoice(db, student_fee_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/invoices/{student_fee_id}/payments", response_model=List[PaymentResponse])
async def list_invoice_payments(
    student_fee_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> List[PaymentResponse]:
    try:
        return await service.list_invoice_payments(db, student_fee_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Payments ---
@router.post(
    "/payments",
    response_model=RecordPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> RecordPaymentResponse:
    try:
        return await service.record_payment(db, payload, recorded_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Stats ---
@router.get("/stats", response_model=FeeStats)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> FeeStats:
    try:
        return await service.get_stats(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Fee types ---
@router.get("/types", response_model=List[FeeTypeResponse])
async def list_fee_types(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> List[FeeTypeResponse]:
    try:
        return await service.list_fee_types(db)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/types",
    response_model=FeeTypeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_fee_type(
    payload: FeeTypeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> FeeTypeResponse:
    try:
        return await service.create_fee_type(db, payload, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/types/{fee_id}", response_model=FeeTypeResponse)
async def update_fee_type(
    fee_id: UUID,
    payload: FeeTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> FeeTypeResponse:
    try:
        return await service.update_fee_type(db, fee_id, payload, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/types/{fee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee_type(
    fee_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> None:
    try:
        await service.delete_fee_type(db, fee_id, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
