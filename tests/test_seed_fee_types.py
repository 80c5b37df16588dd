from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fee_ledger.core.models import FeeType
from fee_ledger.db.seed_fee_types import DEFAULT_FEE_TYPES, seed_fee_types


@pytest.mark.asyncio
async def test_seed_creates_then_skips(db_session: AsyncSession) -> None:
    first = await seed_fee_types(db_session)
    assert first == {"created": len(DEFAULT_FEE_TYPES), "updated": 0, "skipped": 0}

    second = await seed_fee_types(db_session)
    assert second == {"created": 0, "updated": 0, "skipped": len(DEFAULT_FEE_TYPES)}

    names = (await db_session.execute(select(FeeType.name))).scalars().all()
    assert sorted(names) == sorted(name for name, *_ in DEFAULT_FEE_TYPES)


@pytest.mark.asyncio
async def test_seed_update_resets_amounts(db_session: AsyncSession) -> None:
    db_session.add(FeeType(name="Tuition Fee", type="other", amount=Decimal("1.00")))
    await db_session.commit()

    counts = await seed_fee_types(db_session, update_existing=True)
    assert counts == {"created": len(DEFAULT_FEE_TYPES) - 1, "updated": 1, "skipped": 0}

    tuition = (
        await db_session.execute(select(FeeType).where(FeeType.name == "Tuition Fee"))
    ).scalar_one()
    assert tuition.type == "tuition"
    assert tuition.amount == Decimal("500.00")
