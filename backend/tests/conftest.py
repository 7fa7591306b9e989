"""
TutorLedger Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the whole suite.
How:   Each test gets a fresh in-memory SQLite database (aiosqlite) with the
       full schema created from the ORM metadata. API tests talk to the app
       through httpx's ASGITransport with get_db_session overridden to use
       that database.

Fixture Hierarchy:
    engine           in-memory database, schema created, disposed after test
    session_factory  async_sessionmaker bound to `engine`
    db_session       one AsyncSession for service-level tests
    tutor / student  seeded rows (Mathematics/Physics tutor, Year 9 student)
    test_client      httpx AsyncClient against the FastAPI app
    admin_headers    X-Admin-Password header for admin routes
"""

import os

# Must run before any tutorledger import: Settings() is built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ADMIN_PASSWORD"] = "test-admin-secret"
os.environ["REFERENCE_TIMEZONE"] = "Africa/Lagos"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone  # noqa: E402
from zoneinfo import ZoneInfo  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from tutorledger.database import Base, get_db_session  # noqa: E402
from tutorledger.models import ClassRecord, Student, Tutor  # noqa: E402
from tutorledger.models.class_record import RecordStatus  # noqa: E402

ADMIN_PASSWORD = "test-admin-secret"
LAGOS = ZoneInfo("Africa/Lagos")


@pytest_asyncio.fixture
async def engine():
    # StaticPool: every session shares the one in-memory connection
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tutor(db_session):
    row = Tutor(
        name="Ada Obi",
        account_number="0123456789",
        bank="First Bank",
        subjects=["Mathematics", "Physics"],
    )
    db_session.add(row)
    await db_session.commit()
    return row


@pytest_asyncio.fixture
async def student(db_session):
    row = Student(name="Tunde Bello", class_level="Year 9", enrolled_subjects=["Mathematics"])
    db_session.add(row)
    await db_session.commit()
    return row


@pytest.fixture
def make_record(tutor, student):
    """Builds an unsaved ClassRecord for the seeded tutor and student."""

    def _make(start: datetime, end: datetime, **overrides) -> ClassRecord:
        fields = dict(
            tutor=tutor,
            student=student,
            class_level="Year 9",
            subject="Mathematics",
            topic="Quadratic equations",
            start_time=start,
            end_time=end,
            date_submitted=start,
            payment_amount=4300,
            status=RecordStatus.VALID.value,
        )
        fields.update(overrides)
        return ClassRecord(**fields)

    return _make


def lagos(year, month, day, hour=0, minute=0) -> datetime:
    """Wall-clock time in the reference timezone as an aware datetime."""
    return datetime(year, month, day, hour, minute, tzinfo=LAGOS)


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient bound to the app, with the request session coming
    from the per-test database.
    """
    from tutorledger.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Password": ADMIN_PASSWORD}
