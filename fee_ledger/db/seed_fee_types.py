"""
Seed script to populate the fees catalog with the standard fee types.

Existing entries (matched by name) are left untouched unless --update is given,
in which case their type and amount are reset to the defaults below.

Usage:
  python -m fee_ledger.db.seed_fee_types
  python -m fee_ledger.db.seed_fee_types --update
"""
import argparse
import asyncio
import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.config import settings
from fee_ledger.core.models import FeeType
from fee_ledger.db.session import Database

logger = logging.getLogger(__name__)

# (name, type, amount, description)
DEFAULT_FEE_TYPES: List[Tuple[str, str, Decimal, str]] = [
    ("Tuition Fee", "tuition", Decimal("500.00"), "Termly tuition"),
    ("Canteen Fee", "canteen", Decimal("80.00"), "Lunch programme"),
    ("Transport Fee", "transport", Decimal("120.00"), "School bus service"),
    ("Exam Fee", "exam", Decimal("50.00"), "End of term examinations"),
    ("Learning Materials", "material", Decimal("60.00"), "Books and stationery"),
]


async def seed_fee_types(db: AsyncSession, update_existing: bool = False) -> Dict[str, int]:
    """Insert missing default fee types. Returns counts of created, updated and skipped rows."""
    counts = {"created": 0, "updated": 0, "skipped": 0}
    existing = {
        fee.name: fee for fee in (await db.execute(select(FeeType))).scalars().all()
    }
    for name, fee_type, amount, description in DEFAULT_FEE_TYPES:
        fee = existing.get(name)
        if fee is None:
            db.add(FeeType(name=name, type=fee_type, amount=amount, description=description))
            counts["created"] += 1
        elif update_existing:
            fee.type = fee_type
            fee.amount = amount
            fee.description = description
            counts["updated"] += 1
        else:
            counts["skipped"] += 1
    await db.commit()
    return counts


async def main(update_existing: bool = False) -> None:
    database = Database(settings.database_url, echo=settings.db_echo)
    try:
        async with database.session() as db:
            try:
                counts = await seed_fee_types(db, update_existing=update_existing)
            except Exception:
                await db.rollback()
                logger.exception("Error seeding fee types")
                raise
    finally:
        await database.dispose()
    logger.info(
        "Fee types seeded: created=%d updated=%d skipped=%d",
        counts["created"], counts["updated"], counts["skipped"],
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the standard fee types")
    parser.add_argument("--update", action="store_true", help="Reset existing defaults to the seed values")
    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(main(update_existing=args.update))
