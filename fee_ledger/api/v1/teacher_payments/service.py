"""Teacher payment service: salary records per teacher and period."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.enums import TeacherPaymentStatus, UserRole
from fee_ledger.core.exceptions import NotFoundError, ServiceError
from fee_ledger.core.models import TeacherPayment, User
from fee_ledger.core.services import check_money, store_failure, to_decimal

from .schemas import (
    TeacherPaymentCreate,
    TeacherPaymentFilter,
    TeacherPaymentResponse,
    TeacherPaymentView,
)

logger = logging.getLogger(__name__)


def _to_response_kwargs(tp: TeacherPayment) -> dict:
    return dict(
        id=tp.id,
        teacher_id=tp.teacher_id,
        amount=to_decimal(tp.amount),
        payment_method=tp.payment_method,
        reference=tp.reference,
        period_month=tp.period_month,
        period_year=tp.period_year,
        status=tp.status,
        notes=tp.notes,
        recorded_by=tp.recorded_by,
        payment_date=tp.payment_date,
        created_at=tp.created_at,
    )


async def list_teacher_payments(
    db: AsyncSession,
    filters: Optional[TeacherPaymentFilter] = None,
) -> List[TeacherPaymentView]:
    filters = filters or TeacherPaymentFilter()
    predicates = []
    if filters.teacher_id is not None:
        predicates.append(TeacherPayment.teacher_id == filters.teacher_id)
    if filters.month:
        predicates.append(TeacherPayment.period_month == filters.month.strip())
    if filters.year is not None:
        predicates.append(TeacherPayment.period_year == filters.year)

    stmt = (
        select(
            TeacherPayment,
            User.full_name.label("teacher_name"),
            User.email.label("teacher_email"),
        )
        .join(User, TeacherPayment.teacher_id == User.id)
        .where(*predicates)
        .order_by(TeacherPayment.payment_date.desc(), TeacherPayment.id)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise await store_failure(db, "list_teacher_payments", exc)
    return [
        TeacherPaymentView(**_to_response_kwargs(tp), teacher_name=name, teacher_email=email)
        for tp, name, email in result.all()
    ]


async def create_teacher_payment(
    db: AsyncSession,
    payload: TeacherPaymentCreate,
    recorded_by: Optional[UUID],
) -> TeacherPaymentResponse:
    amount = check_money(payload.amount, "Payment amount")
    try:
        teacher = await db.get(User, payload.teacher_id)
        if not teacher or teacher.role != UserRole.TEACHER.value:
            raise NotFoundError("Teacher not found")
        tp = TeacherPayment(
            teacher_id=payload.teacher_id,
            amount=amount,
            payment_method=payload.payment_method.value,
            reference=(payload.reference or "").strip() or None,
            period_month=payload.period_month.strip(),
            period_year=payload.period_year,
            status=TeacherPaymentStatus.paid.value,
            notes=(payload.notes or "").strip() or None,
            recorded_by=recorded_by,
        )
        db.add(tp)
        await db.commit()
    except ServiceError as e:
        await db.rollback()
        logger.warning(
            "create_teacher_payment rejected: teacher_id=%s reason=%s", payload.teacher_id, e.message
        )
        raise
    except SQLAlchemyError as exc:
        raise await store_failure(db, "create_teacher_payment", exc, teacher_id=payload.teacher_id)
    await db.refresh(tp)
    logger.info(
        "Teacher payment %s recorded for %s period=%s/%s amount=%s",
        tp.id, tp.teacher_id, tp.period_month, tp.period_year, tp.amount,
    )
    return TeacherPaymentResponse(**_to_response_kwargs(tp))
