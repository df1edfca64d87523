"""
Pytest configuration and fixtures.

I test API girano contro un database SQLite temporaneo (aiosqlite):
le variabili d'ambiente vanno impostate prima di importare app.*,
perché settings ed engine vengono creati all'import.
"""

import os
import tempfile
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

_TEST_DB_DIR = tempfile.mkdtemp(prefix="invoice-manager-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["APP_ENV"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["DB_AUTO_CREATE"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-use"
os.environ["LOG_LEVEL"] = "WARNING"
for _name in ("BOOTSTRAP_ADMIN_USERNAME", "BOOTSTRAP_ADMIN_EMAIL", "BOOTSTRAP_ADMIN_PASSWORD"):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, engine
from app.main import app
from app.models import Base
from app.services.auth_service import get_auth_service

ADMIN_USERNAME = "admin"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"


# ============================================================
# Database e client HTTP
# ============================================================


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _create_admin() -> None:
    async with AsyncSessionLocal() as session:
        await get_auth_service().ensure_admin(session, ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD)
        await session.commit()


@pytest.fixture
def client():
    """TestClient con lifespan attivo e database vuoto."""
    with TestClient(app) as test_client:
        test_client.portal.call(_reset_schema)
        yield test_client


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register_user(client, username="alice", email="alice@x.com", password="secret1") -> dict:
    """Registra un utente e restituisce il body della risposta."""
    response = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def user_token(client) -> str:
    """Token di un utente con ruolo `user`."""
    return register_user(client)["token"]


@pytest.fixture
def user_headers(user_token) -> dict[str, str]:
    return auth_headers(user_token)


@pytest.fixture
def admin_token(client) -> str:
    """Token dell'amministratore iniziale."""
    client.portal.call(_create_admin)
    response = client.post(
        "/api/auth/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_headers(admin_token) -> dict[str, str]:
    return auth_headers(admin_token)


# ============================================================
# Fixtures per unit test dei service
# ============================================================


@pytest.fixture
def mock_db():
    """Crea un mock di AsyncSession."""
    db = AsyncMock(spec=AsyncSession)
    # execute restituisce un Result sincrono (scalar_one_or_none, first, ...)
    db.execute = AsyncMock(return_value=MagicMock())
    db.get = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.delete = AsyncMock()
    return db


class MockUser:
    """Mock del modello User."""
    def __init__(self, **kwargs):
        self.id = kwargs.get("id", uuid.uuid4())
        self.username = kwargs.get("username", "admin")
        self.email = kwargs.get("email", "admin@example.com")
        self.password_hash = kwargs.get("password_hash", "hash")
        self.role = kwargs.get("role", "admin")
        self.is_active = kwargs.get("is_active", True)


@pytest.fixture
def mock_admin():
    """Crea un mock di amministratore."""
    return MockUser()


class MockItem:
    """Riga fattura minimale per il calcolo degli importi."""
    def __init__(self, quantity, unit_price, designation="Articolo"):
        self.designation = designation
        self.quantity = Decimal(str(quantity))
        self.unit_price = Decimal(str(unit_price))


@pytest.fixture
def cheese_items():
    """Le righe dell'esempio: 2 × 10.000."""
    return [MockItem(2, "10.000", "Cheese")]


# ============================================================
# Payload di esempio
# ============================================================


@pytest.fixture
def client_payload() -> dict:
    return {
        "name": "Épicerie Centrale",
        "number": "100",
        "address": "Rue de Tunis 5, Bizerte",
        "tax_id": "1234567/A",
    }


@pytest.fixture
def invoice_payload() -> dict:
    return {
        "client_name": "Épicerie Centrale",
        "client_number": "100",
        "client_address": "Rue de Tunis 5, Bizerte",
        "client_tax_id": "1234567/A",
        "date": "2025-03-14",
        "items": [{"designation": "Cheese", "quantity": 2, "unit_price": "10.000"}],
        "with_tva": True,
    }
