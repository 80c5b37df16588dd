import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from decimal import Decimal
from types import SimpleNamespace
from typing import AsyncGenerator, Dict
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from fee_ledger.auth.security import create_access_token
from fee_ledger.core.models import FeeType, SchoolClass, User
from fee_ledger.db.session import Database
from fee_ledger.main import create_app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


def auth_headers(user_id: UUID, role: str, **claims) -> Dict[str, str]:
    token = create_access_token(subject={"user_id": str(user_id), "role": role, **claims})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def database() -> AsyncGenerator[Database, None]:
    """Fresh in-memory SQLite database with all tables. One shared connection."""
    db = Database(
        TEST_DATABASE_URL,
        pool_recycle=None,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture()
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


@pytest.fixture()
async def client(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to an app that uses the test database."""
    app = create_app(database=database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def school(db_session: AsyncSession) -> SimpleNamespace:
    """A small school: one class, an admin, two students, a teacher and two fee types."""
    grade = SchoolClass(name="Grade 5")
    db_session.add(grade)
    await db_session.flush()

    admin = User(email="admin@school.test", full_name="Ada Admin", role="admin")
    alice = User(email="alice@school.test", full_name="Alice Banda", role="student", class_id=grade.id)
    bob = User(email="bob.phiri@school.test", full_name="Bob Phiri", role="student")
    teacher = User(email="tom@school.test", full_name="Tom Mwale", role="teacher")
    tuition = FeeType(name="Tuition Fee", type="tuition", amount=Decimal("50.00"))
    bus = FeeType(name="Bus Fee", type="transport", amount=Decimal("20.00"))
    db_session.add_all([admin, alice, bob, teacher, tuition, bus])
    await db_session.commit()

    return SimpleNamespace(
        grade=grade,
        admin=admin,
        alice=alice,
        bob=bob,
        teacher=teacher,
        tuition=tuition,
        bus=bus,
    )


@pytest.fixture()
def admin_headers(school: SimpleNamespace) -> Dict[str, str]:
    return auth_headers(school.admin.id, "admin")


@pytest.fixture()
def make_headers():
    """Build bearer headers for an arbitrary user id and role."""
    return auth_headers
