"""
Shared test fixtures for NovaPay.

Provides async test client, database session mocks, Redis mocks, a rate
catalog cache, and RSA key fixtures for JWT testing.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import jwt
import pytest
import pytest_asyncio
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient

from novapay.api.deps import get_rate_cache
from novapay.core import security
from novapay.database import get_db
from novapay.models.recipient import Recipient
from novapay.models.user import User, UserStatus
from novapay.redis_client import get_redis
from novapay.services.fx_engine import CatalogRate
from novapay.services.rate_catalog import RateCatalogCache


# --- Fernet Key Fixture ---


@pytest.fixture(scope="session")
def test_fernet_key():
    """Generate a Fernet key for tests."""
    return Fernet.generate_key()


@pytest.fixture(autouse=True)
def setup_fernet(test_fernet_key):
    """Encrypt recipient fields with the test Fernet key."""
    security.configure_fernet(test_fernet_key)


# --- RSA Key Fixtures ---


@pytest.fixture(scope="session")
def test_rsa_keys():
    """Generate a temporary RSA keypair for test JWT signing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )

    return {"private_key": private_pem, "public_key": public_pem}


@pytest.fixture(autouse=True)
def security_with_keys(test_rsa_keys):
    """Verify JWTs against the test RSA public key for every test."""
    security.configure_keys(public_key=test_rsa_keys["public_key"], algorithm="RS256")


@pytest.fixture
def make_token(test_rsa_keys):
    """Mint an access JWT the way the identity provider does."""

    def _token(user_id: str, email: str, expires_in: timedelta = timedelta(minutes=30)) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "type": "access",
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(payload, test_rsa_keys["private_key"], algorithm="RS256")

    return _token


# --- Background tasks ---


@pytest.fixture(autouse=True)
def celery_tasks():
    """Never hit a broker: capture notification task enqueues instead."""
    with patch("novapay.api.transactions.send_transaction_created") as created, \
            patch("novapay.api.transactions.send_admin_transaction_alert") as admin_alert, \
            patch("novapay.api.transactions.send_status_update") as txn_status, \
            patch("novapay.api.admin.send_status_update") as admin_status:
        yield {
            "created": created,
            "admin_alert": admin_alert,
            "status": txn_status,
            "admin_status": admin_status,
        }


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client with common methods."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock()
    return redis


# --- Model factories ---


def _make_user(**overrides) -> User:
    """Create a User instance with test defaults via the normal constructor."""
    defaults = {
        "email": "ada@example.com",
        "first_name": "Ada",
        "last_name": "Okafor",
        "status": UserStatus.ACTIVE,
    }
    defaults.update(overrides)
    return User(**defaults)


@pytest.fixture
def make_user():
    """Factory fixture for creating User instances."""
    return _make_user


@pytest.fixture
def make_recipient():
    """Factory fixture for Recipients with an encrypted account number."""

    def _make(user: User, **overrides) -> Recipient:
        account_number = overrides.pop("account_number", "0123456789")
        defaults = {
            "user_id": user.id,
            "full_name": "Chidi Eze",
            "bank_name": "Access Bank",
            "currency": "NGN",
        }
        defaults.update(overrides)
        recipient = Recipient(**defaults)
        recipient.set_account_number(account_number)
        return recipient

    return _make


@pytest.fixture
def auth_headers_for(make_token):
    """Build a Bearer Authorization header for a user."""

    def _headers(user: User) -> dict:
        token = make_token(user.id, user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


# --- Mock Database Session ---


@pytest.fixture
def mock_db():
    """AsyncMock database session."""
    db = AsyncMock()

    # Mock the result object returned by db.execute()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=None)
    db.execute = AsyncMock(return_value=mock_result)
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.get = AsyncMock(return_value=None)
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    return db


# --- Rate catalog ---


@pytest.fixture
def sample_catalog():
    """A small operator catalog: one fixed-fee and one percentage corridor."""
    return [
        CatalogRate("USD", "NGN", Decimal("1500"), "fixed", Decimal("5")),
        CatalogRate("NGN", "RUB", Decimal("0.0445"), "percentage", Decimal("1.5")),
        CatalogRate("GBP", "EUR", Decimal("1.17"), "free", Decimal("0"), "inactive"),
    ]


@pytest.fixture
def rate_cache(sample_catalog):
    """RateCatalogCache whose loader serves *sample_catalog* without a DB."""
    loader = AsyncMock(return_value=sample_catalog)
    return RateCatalogCache(loader=loader, ttl_seconds=300)


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(mock_db, mock_redis, rate_cache):
    """
    Async HTTP test client with get_db, get_redis and get_rate_cache
    overridden to use test doubles.
    """
    from novapay.main import app

    async def override_get_db():
        yield mock_db

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_rate_cache] = lambda: rate_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
