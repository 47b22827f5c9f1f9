import datetime as dt
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from ledger.core.config import Settings
from ledger.main import create_app
from ledger.models.company import CompanyCreate
from ledger.models.transaction import TransactionCreate, TransactionType
from ledger.repositories.local_store import LocalLedgerStore, LocalStoreAdapter
from ledger.services.ledger_service import LedgerService


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "ledger.json"


@pytest.fixture
def local_store(store_path):
    """JSON-file store in a temp directory."""
    return LocalLedgerStore(store_path)


@pytest.fixture
def store(local_store):
    return LocalStoreAdapter(local_store)


@pytest.fixture
def service(store):
    return LedgerService(store)


@pytest_asyncio.fixture
async def acme(service):
    """A company with no transactions."""
    result = await service.create_company(CompanyCreate(name="Acme Supplies", phone="555-123-4567"))
    return result.value


@pytest_asyncio.fixture
async def acme_with_purchase(service, acme):
    """Acme after a 1000.00 purchase."""
    await service.add_transaction(TransactionCreate(
        company_id=acme.id,
        type=TransactionType.PURCHASE,
        amount=Decimal("1000.00"),
        date=dt.date(2024, 3, 1)
    ))
    return await service.get_company(acme.id)


@pytest.fixture
def local_settings(store_path):
    return Settings(STORAGE_BACKEND="local", LOCAL_STORE_PATH=str(store_path), LOG_LEVEL="WARNING")


@pytest.fixture
def test_client(local_settings):
    """FastAPI test client backed by a temp JSON ledger."""
    with TestClient(create_app(local_settings)) as client:
        yield client


@pytest.fixture
def mongo_settings():
    return Settings(
        STORAGE_BACKEND="mongo",
        SECRET_KEY="test-secret-key",
        LOG_LEVEL="WARNING"
    )


def make_collection():
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()
    return collection


@pytest.fixture
def mock_db():
    """Mock Motor database; db["name"] returns one mock collection per name."""
    collections = {
        name: make_collection()
        for name in ("users", "companies", "transactions", "user_settings")
    }
    db = MagicMock()
    db.__getitem__.side_effect = collections.__getitem__
    db.collections = collections
    return db
