"""Test configuration and fixtures."""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from factories import FIXED_NOW, add_hotel, add_room, add_user, assign_staff
from hotel_booking.core.database import Base, get_db
from hotel_booking.core.dates import utcnow
from hotel_booking.models import Hotel, Room, StaffRole, User, UserRole

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest_asyncio.fixture
async def hotel(test_session) -> Hotel:
    return await add_hotel(test_session, "Harbour View Hotel")


@pytest_asyncio.fixture
async def other_hotel(test_session) -> Hotel:
    return await add_hotel(test_session, "Old Town Inn")


@pytest_asyncio.fixture
async def room(test_session, hotel) -> Room:
    return await add_room(test_session, hotel)


@pytest_asyncio.fixture
async def customer(test_session) -> User:
    return await add_user(test_session, "guest-1", UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def other_customer(test_session) -> User:
    return await add_user(test_session, "guest-2", UserRole.CUSTOMER)


@pytest_asyncio.fixture
async def admin(test_session) -> User:
    return await add_user(test_session, "admin-1", UserRole.ROOM_ADMIN)


@pytest_asyncio.fixture
async def cashier(test_session, hotel) -> User:
    """Front desk cashier assigned to ``hotel``."""
    user = await add_user(test_session, "cashier-1", UserRole.CUSTOMER)
    await assign_staff(test_session, user, hotel, StaffRole.HOTEL_CASHIER)
    return user


@pytest_asyncio.fixture
async def outside_staff(test_session, other_hotel) -> User:
    """Hotel admin of a different hotel."""
    user = await add_user(test_session, "staff-elsewhere", UserRole.CUSTOMER)
    await assign_staff(test_session, user, other_hotel, StaffRole.HOTEL_ADMIN)
    return user


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """Create a test FastAPI application."""
    from fastapi import FastAPI

    from hotel_booking.core.exceptions import ProblemDetailsException, generic_exception_handler, problem_details_handler
    from hotel_booking.routers import audit, booking, health, metrics, room

    # Create a simplified test app without lifespan
    app = FastAPI(
        title="Hotel Booking API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Add inline health endpoints (like in main app)
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "hotel-booking-api",
            "version": "1.0.0",
            "environment": "test",
            "debug": True,
        }

    # Register API routers
    app.include_router(health.router)
    app.include_router(booking.router)
    app.include_router(room.router)
    app.include_router(audit.router)
    app.include_router(metrics.router)

    # Override database dependency
    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    # Clean up
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def future_stay() -> tuple[str, str]:
    """Two-night stay a month from the real clock, for API tests."""
    check_in = utcnow().date() + timedelta(days=30)
    return check_in.isoformat(), (check_in + timedelta(days=2)).isoformat()
