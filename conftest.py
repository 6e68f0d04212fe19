import os
import tempfile
from datetime import datetime, timedelta, timezone

# settings are read at import time, so the environment comes first
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'freight-test-default.db')}",
)
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-freight")
os.environ["ADVISORY_ENABLED"] = "false"
os.environ["TOSS_SECRET_KEY"] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from freight.core import redis as redis_module
from freight.core.config import settings
from freight.core.enums import UserRole
from freight.core.locks import reset_locks
from freight.core.security import JWT_ALGORITHM, Principal, create_access_token, hash_password
from freight.db.init_db import create_tables, drop_tables
from freight.db.session import get_db
from freight.main import app
from freight.models.user import User
from freight.schemas.quote import QuoteCreate
from freight.services import match_service, quote_service
from freight.services.clients.advisory import get_advisory_client
from freight.services.clients.business_registry import get_registry_client
from freight.services.clients.toss_payments import ConfirmResult, get_payments_client

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def fresh_locks():
    reset_locks()
    yield
    reset_locks()


@pytest.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'freight.db'}",
        connect_args={"check_same_thread": False},
    )
    await create_tables(test_engine)
    yield test_engine
    await drop_tables(test_engine)
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class FakeRegistry:

    def __init__(self, code="01", error=None):
        self.code = code
        self.error = error
        self.calls = []

    async def validate(self, business):
        self.calls.append(business)
        if self.error is not None:
            raise self.error
        return self.code


class FakeGateway:

    def __init__(self, status="DONE", error=None, configured=True):
        self.status = status
        self.error = error
        self.configured = configured
        self.client_key = "test_ck_freight"
        self.calls = []

    @property
    def is_configured(self):
        return self.configured

    async def confirm(self, payment_key, order_id, amount):
        self.calls.append((payment_key, order_id, amount))
        if self.error is not None:
            raise self.error
        return ConfirmResult(
            payment_key=payment_key,
            order_id=order_id,
            status=self.status,
            total_amount=amount,
            approved_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        )


class FakeAdvisory:

    def __init__(self, advice=None):
        self.advice = advice
        self.prompts = []

    async def generate_advice(self, prompt):
        self.prompts.append(prompt)
        return self.advice


class FakeRedis:
    """In-memory stand-in for the redis.asyncio calls the app makes"""

    def __init__(self):
        self.store = {}
        self.expiry = {}
        self.fail = False

    def _check(self):
        if self.fail:
            raise ConnectionError("redis is down")

    async def get(self, key):
        self._check()
        value = self.store.get(key)
        if isinstance(value, str):
            return value.encode()
        return value

    async def set(self, key, value, ex=None):
        self._check()
        self.store[key] = value
        self.expiry[key] = ex
        return True

    async def incr(self, key):
        self._check()
        self.store[key] = str(int(self.store.get(key, 0)) + 1)
        return int(self.store[key])

    async def delete(self, key):
        self._check()
        self.store.pop(key, None)


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", fake)
    return fake


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fake_advisory():
    return FakeAdvisory()


@pytest.fixture
async def client(session_factory, fake_registry, fake_gateway, fake_advisory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry_client] = lambda: fake_registry
    app.dependency_overrides[get_payments_client] = lambda: fake_gateway
    app.dependency_overrides[get_advisory_client] = lambda: fake_advisory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def _make_user(db, email, role, name):
    user = User.create(
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        role=role,
        name=name,
    )
    db.add(user)
    await db.commit()
    return Principal(id=user.id, role=user.role)


@pytest.fixture
def user_factory(db):
    async def _create(email, role=UserRole.SHIPPER, name="Test User"):
        return await _make_user(db, email, role, name)
    return _create


@pytest.fixture
async def shipper(db):
    return await _make_user(db, "shipper@example.com", UserRole.SHIPPER, "Shipper One")


@pytest.fixture
async def other_shipper(db):
    return await _make_user(db, "shipper2@example.com", UserRole.SHIPPER, "Shipper Two")


@pytest.fixture
async def driver(db):
    return await _make_user(db, "driver@example.com", UserRole.DRIVER, "Driver One")


@pytest.fixture
async def other_driver(db):
    return await _make_user(db, "driver2@example.com", UserRole.DRIVER, "Driver Two")


@pytest.fixture
async def admin(db):
    return await _make_user(db, "admin@example.com", UserRole.ADMIN, "Admin")


def auth_headers(principal: Principal) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal.id, principal.role)}"}


@pytest.fixture
def headers():
    return auth_headers


@pytest.fixture
def expired_token():
    payload = {
        "sub": "1",
        "role": UserRole.SHIPPER.value,
        "exp": datetime.now(timezone.utc) - timedelta(hours=1),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)


@pytest.fixture
def quote_payload():
    def _payload(**overrides):
        data = {
            "origin_address": "Seoul, Gangnam-gu 1",
            "destination_address": "Incheon, Namdong-gu 2",
            "distance_km": 12,
            "weight_kg": 500,
            "vehicle_type": "TON_1",
            "cargo_name": "Boxes",
            "load_method": "SHIPPER",
            "unload_method": "SHIPPER",
            "allow_combine": False,
        }
        data.update(overrides)
        return data
    return _payload


@pytest.fixture
def make_quote(session_factory, quote_payload):
    async def _create(principal, **overrides):
        async with session_factory() as session:
            quote, _, _ = await quote_service.create_quote(session, principal, QuoteCreate(**quote_payload(**overrides)))
            return quote
    return _create


@pytest.fixture
def make_match(session_factory):
    async def _create(principal, quote_id):
        async with session_factory() as session:
            return await match_service.create_match(session, principal, quote_id)
    return _create


@pytest.fixture
def accept(session_factory):
    async def _accept(principal, match_id):
        async with session_factory() as session:
            return await match_service.accept_match(session, principal, match_id)
    return _accept


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "concurrency: marks tests racing concurrent requests"
    )
    config.addinivalue_line(
        "markers", "payments: marks tests related to payments"
    )
    config.addinivalue_line(
        "markers", "audit: marks tests related to audit logging"
    )
