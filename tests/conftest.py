"""
Test configuration and fixtures
"""

import os
import tempfile
import time
from datetime import date, timedelta
from types import SimpleNamespace
from typing import AsyncGenerator, Dict, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
import stripe
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment before the application reads its settings
os.environ["APP_ENV"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-0123456789"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-that-is-long-enough-0123"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["PROMETHEUS_ENABLED"] = "false"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="sportsbnb-storage-")
os.environ["LOG_FORMAT"] = "text"

# Models must be imported before create_all
import sportsbnb.models  # noqa: E402,F401
from sportsbnb.config import settings  # noqa: E402
from sportsbnb.core.database import Base, get_session  # noqa: E402
from sportsbnb.core.redis import redis_manager  # noqa: E402
from sportsbnb.core.security import security_manager  # noqa: E402
from sportsbnb.domain.availability import default_week  # noqa: E402
from sportsbnb.models.game import Game, GameStatus  # noqa: E402
from sportsbnb.models.profile import Profile  # noqa: E402
from sportsbnb.models.user import User, UserRole  # noqa: E402
from sportsbnb.models.venue import Venue, VenueHours  # noqa: E402

TEST_PASSWORD = "TestPass123!"


class InMemoryRedis:
    """
    Minimal asyncio Redis double covering the commands RedisManager uses
    """

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.expiry: Dict[str, float] = {}

    def _alive(self, key: str) -> bool:
        deadline = self.expiry.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self.store.pop(key, None)
            self.expiry.pop(key, None)
        return key in self.store

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> Optional[str]:
        return self.store[key] if self._alive(key) else None

    async def set(self, key: str, value: str, nx: bool = False, ex: Optional[int] = None) -> Optional[bool]:
        if nx and self._alive(key):
            return None
        self.store[key] = value
        self.expiry.pop(key, None)
        if ex:
            self.expiry[key] = time.monotonic() + ex
        return True

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.expiry[key] = time.monotonic() + ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._alive(key):
                removed += 1
            self.store.pop(key, None)
            self.expiry.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if self._alive(key))

    async def incr(self, key: str) -> int:
        value = int(self.store[key]) + 1 if self._alive(key) else 1
        self.store[key] = str(value)
        return value

    async def expire(self, key: str, seconds: int) -> bool:
        if not self._alive(key):
            return False
        self.expiry[key] = time.monotonic() + seconds
        return True

    async def eval(self, script: str, numkeys: int, key: str, token: str) -> int:
        # Only the compare-and-delete lock release script is used
        if self._alive(key) and self.store[key] == token:
            return await self.delete(key)
        return 0

    async def aclose(self) -> None:
        self.store.clear()


def next_weekday(weekday: int, weeks_ahead: int = 1) -> date:
    """
    A future date on ``weekday`` (Python numbering, Monday = 0)
    """
    today = date.today()
    days = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days + 7 * (weeks_ahead - 1))


def auth_headers_for(user: User) -> Dict[str, str]:
    token = security_manager.create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def fake_redis():
    """Every test gets an empty Redis"""
    previous = redis_manager.client
    fake = InMemoryRedis()
    redis_manager.client = fake
    yield fake
    redis_manager.client = previous


@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite shared by every connection in the test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """Create test client with a fresh session per request"""
    from sportsbnb.main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


async def create_user(
    db_session: AsyncSession,
    role: UserRole = UserRole.PLAYER,
    full_name: str = "Test User",
    **profile_fields
) -> User:
    """Helper creating a user with its profile"""
    email = f"{role.value}_{uuid4().hex[:8]}@example.com"
    user = User(
        email=email,
        password_hash=security_manager.hash_password(TEST_PASSWORD),
        role=role,
        is_active=True,
    )
    user.profile = Profile(
        user_type="owner" if role == UserRole.OWNER else "player",
        full_name=full_name,
        email=email,
        **profile_fields
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def test_player(db_session):
    return await create_user(db_session, UserRole.PLAYER, "Ani Player")


@pytest_asyncio.fixture
async def other_player(db_session):
    return await create_user(db_session, UserRole.PLAYER, "Davit Player")


@pytest_asyncio.fixture
async def test_owner(db_session):
    return await create_user(db_session, UserRole.OWNER, "Owen Owner", business_name="Yerevan Sports")


@pytest_asyncio.fixture
async def test_admin(db_session):
    return await create_user(db_session, UserRole.ADMIN, "Ada Admin")


@pytest.fixture
def player_headers(test_player):
    return auth_headers_for(test_player)


@pytest.fixture
def other_player_headers(other_player):
    return auth_headers_for(other_player)


@pytest.fixture
def owner_headers(test_owner):
    return auth_headers_for(test_owner)


@pytest.fixture
def admin_headers(test_admin):
    return auth_headers_for(test_admin)


@pytest.fixture
def fake_stripe(monkeypatch):
    """
    Stripe with a configured key and recorded API calls. Sessions are
    numbered cs_test_1, cs_test_2, ... in creation order.
    """
    calls = {"created": [], "expired": [], "refunds": []}
    session_state = {"status": "complete", "payment_status": "paid"}

    def create_session(**kwargs):
        calls["created"].append(kwargs)
        session_id = f"cs_test_{len(calls['created'])}"
        return SimpleNamespace(id=session_id, url=f"https://checkout.stripe.com/c/pay/{session_id}")

    def retrieve_session(session_id, **kwargs):
        return SimpleNamespace(
            id=session_id,
            status=session_state["status"],
            payment_status=session_state["payment_status"],
            payment_intent="pi_test_1",
        )

    def expire_session(session_id, **kwargs):
        calls["expired"].append(session_id)
        return SimpleNamespace(id=session_id, status="expired")

    def create_refund(**kwargs):
        calls["refunds"].append(kwargs)
        return SimpleNamespace(id="re_test_1")

    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr(stripe.checkout.Session, "create", create_session)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", retrieve_session)
    monkeypatch.setattr(stripe.checkout.Session, "expire", expire_session)
    monkeypatch.setattr(stripe.Refund, "create", create_refund)
    return SimpleNamespace(calls=calls, session=session_state)


async def create_venue(db_session: AsyncSession, owner: User, **fields) -> Venue:
    values = {
        "name": "Republic Arena",
        "address": "1 Republic Square",
        "city": "Yerevan",
        "latitude": 40.1792,
        "longitude": 44.4991,
        "sports": ["Football"],
        "amenities": ["Parking"],
        "price_per_hour": 40,
        "is_active": True,
    }
    values.update(fields)
    venue = Venue(owner_id=owner.id, **values)
    venue.hours = [
        VenueHours(
            day_of_week=day.day_of_week,
            open_time=day.open_time,
            close_time=day.close_time,
            is_closed=day.is_closed,
        )
        for day in default_week()
    ]
    db_session.add(venue)
    await db_session.commit()
    await db_session.refresh(venue)
    return venue


@pytest_asyncio.fixture
async def test_venue(db_session, test_owner):
    return await create_venue(db_session, test_owner)


async def create_game(db_session: AsyncSession, host: User, **fields) -> Game:
    values = {
        "title": "Sunday League Kickabout",
        "sport": "Football",
        "skill_level": "all",
        "location": "Republic Arena",
        "latitude": 40.1792,
        "longitude": 44.4991,
        "game_date": date.today() + timedelta(days=3),
        "game_time": "18:00",
        "duration_hours": 1,
        "max_players": 4,
        "price_per_player": 0,
        "is_public": True,
        "status": GameStatus.OPEN,
    }
    values.update(fields)
    game = Game(host_id=host.id, **values)
    db_session.add(game)
    await db_session.commit()
    await db_session.refresh(game)
    return game


@pytest_asyncio.fixture
async def test_game(db_session, test_player):
    return await create_game(db_session, test_player)
