"""Pytest configuration and fixtures."""

import asyncio
import os
import sys
from decimal import Decimal
from uuid import uuid4

# Must be set before config is imported so the module-level engine is SQLite
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from auth.jwt import create_access_token
from auth.passwords import hash_password
from config import Settings
from db import Base
from errors import ProviderError
from main import create_app
from models.location import Location
from models.user import User
from models.vehicle import Vehicle
from services.payment_gateway import CreatedIntent, RetrievedIntent

# Fix Windows asyncio event loop
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_JWT_SECRET = "test-secret"
TEST_PASSWORD = "secret123"


class FakePaymentGateway:
    """In-memory stand-in for StripePaymentGateway."""

    def __init__(self):
        self.intents: dict[str, RetrievedIntent] = {}
        self.created: list[CreatedIntent] = []
        self.retrieve_error: Exception | None = None
        self.retrieve_calls = 0

    def add_intent(self, intent_id: str, *, status: str = "succeeded", amount: int = 15000) -> None:
        self.intents[intent_id] = RetrievedIntent(id=intent_id, status=status, amount=amount)

    async def create_intent(self, amount_minor_units, currency=None, metadata=None) -> CreatedIntent:
        intent_id = f"pi_test_{len(self.created) + 1}"
        created = CreatedIntent(
            client_secret=f"{intent_id}_secret_test",
            provider_intent_id=intent_id,
            amount=amount_minor_units,
        )
        self.created.append(created)
        self.add_intent(intent_id, status="requires_payment_method", amount=amount_minor_units)
        return created

    async def retrieve_intent(self, provider_intent_id: str) -> RetrievedIntent:
        self.retrieve_calls += 1
        if self.retrieve_error is not None:
            raise self.retrieve_error
        try:
            return self.intents[provider_intent_id]
        except KeyError:
            raise ProviderError(f"No such payment_intent: {provider_intent_id}")


@pytest.fixture
def settings():
    """Settings with a signing secret and a (dummy) payment key configured."""
    return Settings(
        DATABASE_URL=TEST_DATABASE_URL,
        JWT_SECRET=TEST_JWT_SECRET,
        STRIPE_SECRET_KEY="sk_test_dummy",
        CORS_ORIGINS=["http://testserver"],
    )


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def payment_gateway():
    return FakePaymentGateway()


@pytest.fixture
def app(settings, db_session, payment_gateway):
    """Application wired to the test session and the fake gateway."""
    from api.deps import get_db

    application = create_app(settings)

    async def _get_db():
        yield db_session

    application.dependency_overrides[get_db] = _get_db
    application.state.payment_gateway = payment_gateway
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


def make_auth_headers(token: str) -> dict:
    """
    Helper function to create auth headers.

    Args:
        token: JWT token

    Returns:
        Headers dict with a bearer Authorization header
    """
    return {"Authorization": f"Bearer {token}"}


def make_token(user: User, *, role: str | None = None, secret: str = TEST_JWT_SECRET, **kwargs) -> str:
    return create_access_token(
        user_id=str(user.id),
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        role=role or user.role,
        secret=secret,
        **kwargs,
    )


@pytest.fixture
def token_factory():
    """Factory issuing tokens for a user; the role claim can be overridden."""
    return make_token


async def _create_user(db_session, *, email: str, role: str, first_name: str) -> User:
    user = User(
        id=uuid4(),
        first_name=first_name,
        last_name="Tester",
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session):
    """Create an admin user."""
    return await _create_user(db_session, email="admin@example.com", role="admin", first_name="Ada")


@pytest_asyncio.fixture
async def customer_user(db_session):
    """Create a regular ('user' role) customer."""
    return await _create_user(db_session, email="carol@example.com", role="user", first_name="Carol")


@pytest_asyncio.fixture
async def other_customer(db_session):
    """Create a second customer, for ownership checks."""
    return await _create_user(db_session, email="dave@example.com", role="user", first_name="Dave")


@pytest.fixture
def admin_headers(admin_user):
    return make_auth_headers(make_token(admin_user))


@pytest.fixture
def customer_headers(customer_user):
    return make_auth_headers(make_token(customer_user))


@pytest_asyncio.fixture
async def vehicle(db_session):
    """Create an available vehicle."""
    vehicle = Vehicle(
        id=uuid4(),
        manufacturer="Toyota",
        model="Corolla",
        year=2022,
        fuel_type="Petrol",
        transmission="Automatic",
        seating_capacity=5,
        rental_rate=Decimal("50.00"),
        availability=True,
    )
    db_session.add(vehicle)
    await db_session.commit()
    await db_session.refresh(vehicle)
    return vehicle


@pytest_asyncio.fixture
async def location(db_session):
    """Create a pickup location."""
    location = Location(
        id=uuid4(),
        name="Airport",
        address="1 Terminal Road",
        city="Nairobi",
        country="Kenya",
    )
    db_session.add(location)
    await db_session.commit()
    await db_session.refresh(location)
    return location
