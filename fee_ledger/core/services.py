"""Helpers shared by the ledger services: value coercion, money checks, store failures."""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.exceptions import TransientStoreError, ValidationError

logger = logging.getLogger(__name__)

# Money columns are Numeric(10, 2).
MONEY_PLACES = Decimal("0.01")
MONEY_MAX = Decimal("99999999.99")


def to_uuid(val):
    if val is None:
        return None
    return val if isinstance(val, UUID) else UUID(str(val))


def to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def check_money(amount: Decimal, label: str) -> Decimal:
    """Reject amounts the store would round or overflow. Zero and negatives included."""
    amount = to_decimal(amount)
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than zero")
    if amount > MONEY_MAX:
        raise ValidationError(f"{label} must not exceed {MONEY_MAX}")
    if amount != amount.quantize(MONEY_PLACES):
        raise ValidationError(f"{label} must have at most 2 decimal places")
    return amount


async def store_failure(
    db: AsyncSession, operation: str, exc: SQLAlchemyError, **context
) -> TransientStoreError:
    """Roll back, log with context and build the error to raise."""
    await db.rollback()
    details = " ".join(f"{k}={v}" for k, v in context.items())
    logger.error("%s failed: %s %s", operation, exc, details, exc_info=exc)
    return TransientStoreError(f"Database error during {operation}")
