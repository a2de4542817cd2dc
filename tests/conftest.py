from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from invoiceflow.main import app
from invoiceflow.db.session import get_invoice_repository
from invoiceflow.models.invoice import Invoice, InvoiceDraft, InvoiceStatus, PriceSnapshot
from invoiceflow.repositories.invoice_repo import InvoiceRepository
from invoiceflow.services.balance_service import get_balance_provider
from invoiceflow.services.price_service import PriceService, get_price_service

BOAT_ADDRESS = "1BoatSLRHtKNngkdXEeobR76b53LETtpyT"


class StaticPriceProvider:
    """Price provider returning a fixed rate."""

    def __init__(self, usd: float = 90000.0):
        self.usd = usd
        self.calls = 0

    async def fetch_price(self) -> PriceSnapshot:
        self.calls += 1
        return PriceSnapshot(usd=self.usd, last_updated=1_700_000_000_000)


class FakeBalanceSource:
    """Balance source returning a fixed balance, or failing."""

    def __init__(self, balance: Decimal | None = Decimal("0"), error: Exception | None = None):
        self.balance = balance
        self.error = error
        self.calls = []

    async def fetch_balance(self, address: str) -> Decimal:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return self.balance


@pytest.fixture
def slot_store():
    """Backing dict for the mocked storage_slots collection."""
    return {}


@pytest.fixture
def mock_db(slot_store):
    """Mock MongoDB database whose storage_slots collection lives in a dict"""
    mock_db = MagicMock()

    async def find_one(query):
        return slot_store.get(query["_id"])

    async def replace_one(query, doc, upsert=False):
        slot_store[query["_id"]] = doc
        return MagicMock(matched_count=1)

    async def delete_one(query):
        removed = slot_store.pop(query["_id"], None)
        return MagicMock(deleted_count=0 if removed is None else 1)

    slots = MagicMock()
    slots.find_one = AsyncMock(side_effect=find_one)
    slots.replace_one = AsyncMock(side_effect=replace_one)
    slots.delete_one = AsyncMock(side_effect=delete_one)
    mock_db.__getitem__.return_value = slots
    mock_db.storage_slots = slots

    return mock_db


@pytest.fixture
def repository(mock_db):
    return InvoiceRepository(mock_db)


@pytest.fixture
def price():
    return PriceSnapshot(usd=90000, last_updated=1_700_000_000_000)


@pytest.fixture
def draft():
    return InvoiceDraft(
        recipient_address=BOAT_ADDRESS,
        amount_btc="0.00150000",
        description="Design work",
    )


@pytest.fixture
def pending_invoice():
    return Invoice(
        id="3f1c9a52-2f4e-4a43-9a5e-1d2b7f0c8e11",
        recipient_address=BOAT_ADDRESS,
        amount_btc="0.0015",
        amount_usd="135.00",
        description="Design work",
        created_at=1_700_000_000_000,
        status=InvoiceStatus.PENDING,
    )


@pytest.fixture
def price_provider():
    return StaticPriceProvider()


@pytest.fixture
def balance_source():
    return FakeBalanceSource()


@pytest_asyncio.fixture
async def client(repository, price_provider, balance_source):
    """API client with storage, price and balance collaborators replaced."""
    app.dependency_overrides[get_invoice_repository] = lambda: repository
    app.dependency_overrides[get_price_service] = lambda: PriceService(providers=[price_provider])
    app.dependency_overrides[get_balance_provider] = lambda: balance_source

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_balance_source():
    return FakeBalanceSource


@pytest.fixture
def make_price_provider():
    return StaticPriceProvider
