"""Fee ledger service: fee types, invoices, payments, stats. Every ledger write is audited."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.enums import InvoiceStatus, PaymentMethod
from fee_ledger.core.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from fee_ledger.core.models import FeeAuditLog, FeeType, Payment, SchoolClass, StudentFee, User
from fee_ledger.core.services import check_money, store_failure, to_decimal, to_uuid

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

logger = logging.getLogger(__name__)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# --- Audit helper ---
async def _log_fee_audit(
    db: AsyncSession,
    reference_table: str,
    reference_id: UUID,
    action_type: str,
    old_value: Optional[dict],
    new_value: Optional[dict],
    changed_by: Optional[UUID],
) -> None:
    log = FeeAuditLog(
        reference_table=reference_table,
        reference_id=reference_id,
        action_type=action_type,
        old_value=old_value,
        new_value=new_value,
        changed_by=changed_by,
    )
    db.add(log)


# --- Fee types ---
def _fee_type_to_response(fee: FeeType) -> FeeTypeResponse:
    return FeeTypeResponse(
        id=to_uuid(fee.id),
        name=fee.name,
        type=fee.type,
        amount=to_decimal(fee.amount),
        description=fee.description,
        created_at=fee.created_at,
        updated_at=fee.updated_at,
    )


async def list_fee_types(db: AsyncSession) -> List[FeeTypeResponse]:
    try:
        result = await db.execute(select(FeeType).order_by(FeeType.name, FeeType.id))
    except SQLAlchemyError as exc:
        raise await store_failure(db, "list_fee_types", exc)
    return [_fee_type_to_response(f) for f in result.scalars().all()]


async def create_fee_type(
    db: AsyncSession,
    payload: FeeTypeCreate,
    changed_by: Optional[UUID] = None,
) -> FeeTypeResponse:
    try:
        fee = FeeType(
            name=payload.name.strip(),
            type=payload.type.value,
            amount=payload.amount,
            description=(payload.description or "").strip() or None,
        )
        db.add(fee)
        await db.flush()
        await _log_fee_audit(
            db, "fees", fee.id, "CREATE", None,
            {"name": fee.name, "type": fee.type, "amount": str(payload.amount)},
            changed_by,
        )
        await db.commit()
    except SQLAlchemyError as exc:
        raise await store_failure(db, "create_fee_type", exc, name=payload.name)
    await db.refresh(fee)
    logger.info("Fee type %s created: %s (%s)", fee.id, fee.name, fee.amount)
    return _fee_type_to_response(fee)


async def update_fee_type(
    db: AsyncSession,
    fee_id: UUID,
    payload: FeeTypeUpdate,
    changed_by: Optional[UUID] = None,
) -> FeeTypeResponse:
    """Edit a catalog entry. Invoices already issued keep their own amount."""
    try:
        fee = await db.get(FeeType, fee_id)
        if not fee:
            raise NotFoundError("Fee type not found")
        old = {"name": fee.name, "type": fee.type, "amount": str(fee.amount), "description": fee.description}
        if payload.name is not None:
            fee.name = payload.name.strip()
        if payload.type is not None:
            fee.type = payload.type.value
        if payload.amount is not None:
            fee.amount = payload.amount
        if payload.description is not None:
            fee.description = payload.description.strip() or None
        await _log_fee_audit(
            db, "fees", fee.id, "UPDATE", old,
            {"name": fee.name, "type": fee.type, "amount": str(fee.amount), "description": fee.description},
            changed_by,
        )
        await db.commit()
    except ServiceError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        raise await store_failure(db, "update_fee_type", exc, fee_id=fee_id)
    await db.refresh(fee)
    return _fee_type_to_response(fee)


async def delete_fee_type(
    db: AsyncSession,
    fee_id: UUID,
    changed_by: Optional[UUID] = None,
) -> None:
    try:
        fee = await db.get(FeeType, fee_id)
        if not fee:
            raise NotFoundError("Fee type not found")
        in_use = await db.scalar(
            select(func.count()).select_from(StudentFee).where(StudentFee.fee_id == fee_id)
        )
        if in_use:
            raise ConflictError("Cannot delete fee type because it is assigned to students")
        await _log_fee_audit(
            db, "fees", fee.id, "DELETE",
            {"name": fee.name, "type": fee.type, "amount": str(fee.amount)}, None,
            changed_by,
        )
        await db.delete(fee)
        await db.commit()
    except ServiceError as e:
        await db.rollback()
        logger.warning("delete_fee_type rejected: fee_id=%s reason=%s", fee_id, e.message)
        raise
    except SQLAlchemyError as exc:
        raise await store_failure(db, "delete_fee_type", exc, fee_id=fee_id)
    logger.info("Fee type %s deleted", fee_id)


# --- Invoices ---
def _sf_to_response(sf: StudentFee) -> StudentFeeResponse:
    return StudentFeeResponse(
        id=to_uuid(sf.id),
        student_id=to_uuid(sf.student_id),
        fee_id=to_uuid(sf.fee_id),
        amount=to_decimal(sf.amount),
        paid_amount=to_decimal(sf.paid_amount),
        status=sf.status,
        due_date=sf.due_date,
        created_at=sf.created_at,
        updated_at=sf.updated_at,
    )


def _invoice_view_stmt():
    return (
        select(
            StudentFee,
            User.full_name.label("student_name"),
            SchoolClass.name.label("class_name"),
            FeeType.name.label("fee_type"),
        )
        .join(User, StudentFee.student_id == User.id)
        .outerjoin(SchoolClass, User.class_id == SchoolClass.id)
        .outerjoin(FeeType, StudentFee.fee_id == FeeType.id)
        .execution_options(populate_existing=True)
    )


def _row_to_invoice_view(row) -> InvoiceView:
    sf, student_name, class_name, fee_type = row
    amount = to_decimal(sf.amount)
    paid = to_decimal(sf.paid_amount)
    return InvoiceView(
        id=to_uuid(sf.id),
        student_id=to_uuid(sf.student_id),
        student_name=student_name,
        class_name=class_name,
        fee_id=to_uuid(sf.fee_id),
        fee_type=fee_type,
        amount=amount,
        paid_amount=paid,
        balance=amount - paid,
        status=sf.status,
        due_date=sf.due_date,
        created_at=sf.created_at,
    )


def _invoice_predicates(filters: InvoiceFilter) -> list:
    """Build WHERE predicates from the recognized filter options only."""
    predicates = []
    status_value = (filters.status or "").strip().lower()
    if status_value and status_value != "all":
        try:
            predicates.append(StudentFee.status == InvoiceStatus(status_value).value)
        except ValueError:
            raise ValidationError(f"Unknown invoice status: {filters.status}")
    search = (filters.search or "").strip()
    if search:
        pattern = f"%{_escape_like(search)}%"
        predicates.append(
            or_(
                User.full_name.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            )
        )
    return predicates


async def list_invoices(
    db: AsyncSession,
    filters: Optional[InvoiceFilter] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[InvoiceView]:
    """Invoices with student, class and fee type names, newest first."""
    predicates = _invoice_predicates(filters or InvoiceFilter())
    stmt = (
        _invoice_view_stmt()
        .where(*predicates)
        .order_by(StudentFee.created_at.desc(), StudentFee.id)
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as exc:
        raise await store_failure(db, "list_invoices", exc)
    return [_row_to_invoice_view(row) for row in result.all()]


async def get_invoice(db: AsyncSession, student_fee_id: UUID) -> InvoiceView:
    try:
        row = (
            await db.execute(_invoice_view_stmt().where(StudentFee.id == student_fee_id))
        ).one_or_none()
    except SQLAlchemyError as exc:
        raise await store_failure(db, "get_invoice", exc, student_fee_id=student_fee_id)
    if row is None:
        logger.warning("get_invoice: invoice %s not found", student_fee_id)
        raise NotFoundError("Invoice not found")
    return _row_to_invoice_view(row)


async def create_invoice(
    db: AsyncSession,
    payload: InvoiceCreate,
    created_by: Optional[UUID] = None,
) -> StudentFeeResponse:
    """
    Assign a fee to a student. When fee_id is given without an amount,
    the amount comes from the fee type. Always starts pending with nothing paid.
    """
    try:
        student = await db.get(User, payload.student_id)
        if not student:
            raise NotFoundError("Student not found")
        amount = payload.amount
        if payload.fee_id is not None:
            fee = await db.get(FeeType, payload.fee_id)
            if not fee:
                raise NotFoundError("Fee type not found")
            if amount is None:
                amount = to_decimal(fee.amount)
        if amount is None:
            raise ValidationError("amount is required when no fee type is given")
        amount = check_money(amount, "Invoice amount")

        sf = StudentFee(
            student_id=payload.student_id,
            fee_id=payload.fee_id,
            amount=amount,
            paid_amount=Decimal("0"),
            status=InvoiceStatus.pending.value,
            due_date=payload.due_date,
        )
        db.add(sf)
        await db.flush()
        await _log_fee_audit(
            db, "student_fees", sf.id, "CREATE", None,
            {
                "student_id": str(payload.student_id),
                "fee_id": str(payload.fee_id) if payload.fee_id else None,
                "amount": str(amount),
                "status": InvoiceStatus.pending.value,
            },
            created_by,
        )
        await db.commit()
    except ServiceError as e:
        await db.rollback()
        logger.warning(
            "create_invoice rejected: student_id=%s fee_id=%s reason=%s",
            payload.student_id, payload.fee_id, e.message,
        )
        raise
    except SQLAlchemyError as exc:
        raise await store_failure(db, "create_invoice", exc, student_id=payload.student_id)
    await db.refresh(sf)
    logger.info("Invoice %s created for student %s amount=%s", sf.id, sf.student_id, amount)
    return _sf_to_response(sf)


# --- Payments ---
def _payment_to_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=to_uuid(p.id),
        student_fee_id=to_uuid(p.student_fee_id),
        amount=to_decimal(p.amount),
        payment_method=p.payment_method,
        reference=p.reference,
        notes=p.notes,
        recorded_by=to_uuid(p.recorded_by),
        created_at=p.created_at,
    )


async def record_payment(
    db: AsyncSession,
    payload: PaymentCreate,
    recorded_by: Optional[UUID],
) -> RecordPaymentResponse:
    """
    Apply a payment to an invoice in one transaction.

    The invoice row is moved by a single guarded UPDATE
    (paid_amount = paid_amount + amount, only while it stays <= amount), so
    concurrent payments on the same invoice serialize on the row and never
    lose an increment. The payment row and audit entries commit with it.
    """
    try:
        amount = check_money(payload.amount, "Payment amount")
    except ValidationError as e:
        logger.warning(
            "record_payment rejected: student_fee_id=%s amount=%s reason=%s",
            payload.student_fee_id, payload.amount, e.message,
        )
        raise
    method = PaymentMethod(payload.payment_method).value

    new_paid = StudentFee.paid_amount + amount
    stmt = (
        update(StudentFee)
        .where(StudentFee.id == payload.student_fee_id, new_paid <= StudentFee.amount)
        .values(
            paid_amount=new_paid,
            status=case(
                (new_paid >= StudentFee.amount, InvoiceStatus.paid.value),
                else_=InvoiceStatus.partial.value,
            ),
        )
        .returning(StudentFee.id, StudentFee.paid_amount, StudentFee.status)
        .execution_options(synchronize_session=False)
    )
    try:
        updated = (await db.execute(stmt)).one_or_none()
        if updated is None:
            exists = await db.scalar(
                select(StudentFee.id).where(StudentFee.id == payload.student_fee_id)
            )
            if exists is None:
                raise NotFoundError("Invoice not found")
            raise ConflictError("Payment amount exceeds the outstanding balance")

        _, paid_after, status_after = updated
        paid_after = to_decimal(paid_after)
        payment = Payment(
            student_fee_id=payload.student_fee_id,
            amount=amount,
            payment_method=method,
            reference=(payload.reference or "").strip() or None,
            notes=(payload.notes or "").strip() or None,
            recorded_by=recorded_by,
        )
        db.add(payment)
        await db.flush()
        await _log_fee_audit(
            db, "payments", payment.id, "CREATE", None,
            {"amount": str(amount), "payment_method": method, "student_fee_id": str(payload.student_fee_id)},
            recorded_by,
        )
        await _log_fee_audit(
            db, "student_fees", payload.student_fee_id, "UPDATE",
            {"paid_amount": str(paid_after - amount)},
            {"paid_amount": str(paid_after), "status": status_after},
            recorded_by,
        )
        await db.commit()
    except ServiceError as e:
        await db.rollback()
        logger.warning(
            "record_payment rejected: student_fee_id=%s amount=%s reason=%s",
            payload.student_fee_id, amount, e.message,
        )
        raise
    except SQLAlchemyError as exc:
        raise await store_failure(
            db, "record_payment", exc, student_fee_id=payload.student_fee_id, amount=amount
        )

    await db.refresh(payment)
    sf = await db.get(StudentFee, payload.student_fee_id, populate_existing=True)
    logger.info(
        "Payment %s recorded on invoice %s amount=%s paid_amount=%s status=%s",
        payment.id, sf.id, amount, sf.paid_amount, sf.status,
    )
    return RecordPaymentResponse(
        payment=_payment_to_response(payment),
        fee=_sf_to_response(sf),
    )


async def list_invoice_payments(db: AsyncSession, student_fee_id: UUID) -> List[PaymentResponse]:
    """Payments applied to one invoice, oldest first."""
    try:
        if await db.get(StudentFee, student_fee_id) is None:
            logger.warning("list_invoice_payments: invoice %s not found", student_fee_id)
            raise NotFoundError("Invoice not found")
        result = await db.execute(
            select(Payment)
            .where(Payment.student_fee_id == student_fee_id)
            .order_by(Payment.created_at, Payment.id)
        )
    except SQLAlchemyError as exc:
        raise await store_failure(db, "list_invoice_payments", exc, student_fee_id=student_fee_id)
    return [_payment_to_response(p) for p in result.scalars().all()]


# --- Stats ---
async def get_stats(db: AsyncSession) -> FeeStats:
    stmt = select(
        func.coalesce(func.sum(StudentFee.amount), 0).label("total_expected"),
        func.coalesce(func.sum(StudentFee.paid_amount), 0).label("total_received"),
        func.count(
            case(
                (StudentFee.status.in_([InvoiceStatus.pending.value, InvoiceStatus.partial.value]), 1)
            )
        ).label("pending_count"),
        func.count(case((StudentFee.status == InvoiceStatus.overdue.value, 1))).label("overdue_count"),
    )
    try:
        row = (await db.execute(stmt)).one()
    except SQLAlchemyError as exc:
        raise await store_failure(db, "get_stats", exc)
    return FeeStats(
        total_expected=to_decimal(row.total_expected),
        total_received=to_decimal(row.total_received),
        pending_count=int(row.pending_count or 0),
        overdue_count=int(row.overdue_count or 0),
    )
