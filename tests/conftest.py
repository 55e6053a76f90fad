import os
import tempfile

# Settings are read at import time, so the environment must be in place first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pin-digests-and-jwt")
os.environ.setdefault("TIMEZONE", "UTC")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="timeclock-logs-"))

from datetime import datetime
from typing import Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from timeclock.core.database import Base, get_db
from timeclock.core.security import create_access_token, get_pin_digest
from timeclock.main import app
from timeclock.models.shift import Shift, ShiftStatus
from timeclock.models.time_entry import TimeEntry
from timeclock.models.user import User, UserRole, UserStatus
from timeclock.services.time_calculations import hours_between


@pytest.fixture
async def engine(tmp_path):
    """A fresh file-backed SQLite database per test."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'timeclock.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db: AsyncSession):
    """Factory creating committed users."""
    async def _make_user(
        role: UserRole = UserRole.EMPLOYEE,
        pin: Optional[str] = None,
        status: UserStatus = UserStatus.ACTIVE,
        first_name: str = "Test",
        last_name: str = "User",
        email: Optional[str] = None,
        hourly_rate: Optional[float] = None,
    ) -> User:
        user = User(
            id=uuid4(),
            email=email or f"{uuid4().hex[:10]}@test.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=status,
            pin_digest=get_pin_digest(pin) if pin else None,
            hourly_rate=hourly_rate,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_shift(db: AsyncSession):
    """Factory creating committed shifts, bypassing the scheduler's checks."""
    async def _make_shift(
        user: User,
        start_time: datetime,
        end_time: datetime,
        status: ShiftStatus = ShiftStatus.SCHEDULED,
    ) -> Shift:
        shift = Shift(
            id=uuid4(),
            user_id=user.id,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        db.add(shift)
        await db.commit()
        await db.refresh(shift)
        return shift
    return _make_shift


@pytest.fixture
def make_entry(db: AsyncSession):
    """Factory creating committed time entries; a missing clock-out leaves the entry open."""
    async def _make_entry(
        shift: Shift,
        clock_in_time: datetime,
        clock_out_time: Optional[datetime] = None,
    ) -> TimeEntry:
        entry = TimeEntry(
            id=uuid4(),
            user_id=shift.user_id,
            shift_id=shift.id,
            clock_in_time=clock_in_time,
            clock_out_time=clock_out_time,
            total_hours=hours_between(clock_in_time, clock_out_time) if clock_out_time else None,
        )
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        return entry
    return _make_entry


@pytest.fixture
async def employee(make_user) -> User:
    return await make_user(pin="2580", first_name="Erin", last_name="Employee", email="employee@test.com")


@pytest.fixture
async def manager(make_user) -> User:
    return await make_user(role=UserRole.MANAGER, first_name="Morgan", last_name="Manager", email="manager@test.com")


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(role=UserRole.ADMIN, first_name="Alex", last_name="Admin", email="admin@test.com")


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers
