"""Teacher payments router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.auth.rbac import FINANCE_READ_ROLES, FINANCE_WRITE_ROLES, require_roles
from fee_ledger.auth.schemas import CurrentUser
from fee_ledger.core.exceptions import ServiceError
from fee_ledger.db.session import get_db

from .schemas import (
    TeacherPaymentCreate,
    TeacherPaymentFilter,
    TeacherPaymentResponse,
    TeacherPaymentView,
)
from . import service

router = APIRouter(prefix="/api/v1/teacher-payments", tags=["teacher-payments"])


@router.get("", response_model=List[TeacherPaymentView])
async def list_teacher_payments(
    teacher_id: Optional[UUID] = Query(None),
    month: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_READ_ROLES)),
) -> List[TeacherPaymentView]:
    try:
        return await service.list_teacher_payments(
            db, TeacherPaymentFilter(teacher_id=teacher_id, month=month, year=year)
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "",
    response_model=TeacherPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher_payment(
    payload: TeacherPaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_roles(*FINANCE_WRITE_ROLES)),
) -> TeacherPaymentResponse:
    try:
        return await service.create_teacher_payment(db, payload, recorded_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
