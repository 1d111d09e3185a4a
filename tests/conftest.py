"""
Test fixtures for the NeoBank API test suite.

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client (unauthenticated)
  - make_member: Factory that registers a user through the API, optionally
    sets their PIN and links an account with a known balance
  - alice / bob: Two ready-to-transfer members (PIN 1234)
  - frozen_now: Pins the insights/analytics clock to a fixed instant
  - balance_of: Reads a member's total balance through GET /balance

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    StaticPool keeps every session on the one in-memory database.
  - get_db is overridden with a session that commits on success and rolls
    back on any error, exactly like the real dependency, so failed requests
    leave no partial writes behind.
  - Members are created through the real endpoints, not DB inserts.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timezone

from cryptography.fernet import Fernet

# Required settings must exist before neobank.config is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("SECURITY_CODE_ENCRYPTION_KEY", Fernet.generate_key().decode())

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from neobank.database import Base, get_db
from neobank.dependencies import get_clock
from neobank.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"
DEFAULT_PIN = "1234"
FROZEN_NOW = datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)


@dataclass
class Member:
    """A registered test user and the handles tests need to act as them."""
    user_id: str
    email: str
    name: str
    customer_id: str
    public_url: str
    token: str
    account: dict | None = None

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def frozen_now(client):
    """Pin "now" for insights and analytics to FROZEN_NOW."""
    app.dependency_overrides[get_clock] = lambda: FROZEN_NOW
    return FROZEN_NOW


@pytest_asyncio.fixture
async def make_member(client):
    """
    Factory: register a member through the API.

    Usage:
        member = await make_member("a@example.com", balance_cents=10_000_00)

    pin=None skips setting a PIN; balance_cents=None skips linking an account.
    """

    async def _make(
        email: str,
        name: str | None = None,
        pin: str | None = DEFAULT_PIN,
        balance_cents: int | None = None,
        mobile_number: str | None = None,
    ) -> Member:
        body = {"email": email, "password": "SecurePass123!"}
        if name:
            body["name"] = name
        if mobile_number:
            body["mobile_number"] = mobile_number
        response = await client.post("/auth/register", json=body)
        assert response.status_code == 201, f"Register failed: {response.text}"
        data = response.json()

        member = Member(
            user_id=data["user_id"],
            email=data["email"],
            name=data["name"],
            customer_id=data["customer_id"],
            public_url=data["public_url"],
            token=data["token"],
        )

        if pin is not None:
            response = await client.post("/auth/set-pin", json={"pin": pin}, headers=member.headers)
            assert response.status_code == 200, f"Set PIN failed: {response.text}"

        if balance_cents is not None:
            response = await client.post(
                "/accounts/link",
                json={
                    "bank_name": "Test Bank",
                    "institution": "Test Institution",
                    "opening_balance_cents": balance_cents,
                },
                headers=member.headers,
            )
            assert response.status_code == 201, f"Link failed: {response.text}"
            member.account = response.json()

        return member

    return _make


@pytest_asyncio.fixture
async def alice(make_member):
    """Sender with 10,000.00 in one account."""
    return await make_member("alice@example.com", name="Alice", balance_cents=10_000_00,
                             mobile_number="9876543210")


@pytest_asyncio.fixture
async def bob(make_member):
    """Recipient with 500.00 in one account."""
    return await make_member("bob@example.com", name="Bob", balance_cents=500_00,
                             mobile_number="9123456789")


@pytest_asyncio.fixture
async def balance_of(client):
    """Return an async helper giving a member's total active balance."""

    async def _balance(member: Member) -> int:
        response = await client.get("/balance", headers=member.headers)
        assert response.status_code == 200
        return response.json()["total_balance_cents"]

    return _balance
