"""
Pytest configuration and fixtures.
"""
import os
import tempfile
from typing import Any, AsyncGenerator, Dict, List, Optional

# Settings are read at import time, so the environment is prepared before
# anything from imagifine is imported.
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")
os.environ.setdefault("RAZORPAY_WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("OTP_RESEND_COOLDOWN_SECONDS", "0")
os.environ.setdefault("ADMIN_EMAIL", "admin@imagifine.test")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="imagifine-logs-"))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import imagifine.models  # noqa: F401
from imagifine.api.deps import get_notifier, get_payment_gateway
from imagifine.core.database import Base, get_db
from imagifine.core.errors import GatewayUnavailable, NotificationFailed
from imagifine.models.user import User
from imagifine.server import app
from imagifine.services.auth_service import create_token, hash_password
from imagifine.services.payment_gateway import compute_signature

SIGNING_SECRET = os.environ["RAZORPAY_KEY_SECRET"]
WEBHOOK_SECRET = os.environ["RAZORPAY_WEBHOOK_SECRET"]
PASSWORD = "s3cret-pass"


class FakeNotifier:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail = False

    async def send(self, to: str, subject: str, html_body: str, text_body: Optional[str] = None) -> None:
        if self.fail:
            raise NotificationFailed("smtp unreachable")
        self.sent.append({"to": to, "subject": subject, "html": html_body, "text": text_body})


class FakeGateway:
    """In-memory stand-in for the Razorpay adapter."""

    key_id = "rzp_test_key"

    def __init__(self) -> None:
        self.orders: List[Dict[str, Any]] = []
        self.next_order_ids: List[str] = []
        self.fail = False

    async def create_order(self, amount: int, currency: str, receipt: str, notes: Dict[str, Any]) -> str:
        if self.fail:
            raise GatewayUnavailable("gateway down")
        order_id = self.next_order_ids.pop(0) if self.next_order_ids else f"order_{len(self.orders) + 1:04d}"
        self.orders.append(
            {"id": order_id, "amount": amount, "currency": currency, "receipt": receipt, "notes": notes}
        )
        return order_id

    async def fetch_payment(self, payment_id: str) -> Dict[str, Any]:
        if self.fail:
            raise GatewayUnavailable("gateway down")
        return {"id": payment_id, "status": "captured"}


def sign(order_id: str, payment_id: str) -> str:
    return compute_signature(SIGNING_SECRET, order_id, payment_id)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_token(user.id, user.email)}"}


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed database so concurrent sessions get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, Any]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(
        username: str = "alice",
        email: str = "alice@example.com",
        credits: int = 10,
        verified: bool = True,
        role: str = "user",
    ) -> User:
        async with session_factory() as session:
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(PASSWORD),
                credits=credits,
                is_verified=verified,
                role=role,
            )
            session.add(user)
            await session.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def client(session_factory, notifier, gateway) -> AsyncGenerator[AsyncClient, Any]:
    """HTTP client against the app with the store and external services swapped out."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
