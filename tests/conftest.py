import os

# Keep the app's own engines off the developer's database files
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LEDGER_DATABASE_URL", "sqlite://")

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from textile_ledger.database import Base, LedgerBase, get_db, get_ledger_db
from textile_ledger.main import app
from textile_ledger.models import LedgerEntry, Khata, Party, Bill


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # One shared connection so every session sees the same in-memory database
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, pool_pre_ping=True)


# Use TEST_DATABASE_URL / TEST_LEDGER_DATABASE_URL from environment
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")
TEST_LEDGER_DATABASE_URL = os.getenv("TEST_LEDGER_DATABASE_URL", "sqlite://")

engine = _make_engine(TEST_DATABASE_URL)
ledger_engine = _make_engine(TEST_LEDGER_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
TestingLedgerSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=ledger_engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh primary-schema session for each test.

    Services commit their own work, so tables are created before and dropped
    after every test instead of rolling back an outer transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def ledger_session():
    """Fresh ledger-schema session (khatas, parties, bills, transactions)."""
    LedgerBase.metadata.create_all(bind=ledger_engine)
    session = TestingLedgerSessionLocal()

    yield session

    session.close()
    LedgerBase.metadata.drop_all(bind=ledger_engine)


@pytest.fixture
def client(db_session, ledger_session):
    """
    Create a TestClient that uses the test database sessions.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close, the session fixture handles it

    def override_get_ledger_db():
        try:
            yield ledger_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger_db] = override_get_ledger_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_entry(db_session):
    """Insert ledger entries directly, bypassing the service layer."""
    def _make_entry(**fields) -> LedgerEntry:
        values = dict(
            entry_type="PAYABLE",
            description="Test entry",
            amount=Decimal("100.00"),
            remaining_amount=Decimal("100.00"),
            status="PENDING",
        )
        values.update(fields)
        entry = LedgerEntry(**values)
        db_session.add(entry)
        db_session.commit()
        db_session.refresh(entry)
        return entry

    return _make_entry


@pytest.fixture
def sample_khata(ledger_session):
    """Create a ledger-schema khata for testing."""
    khata = Khata(name="Main Account Book", description="Primary business khata")
    ledger_session.add(khata)
    ledger_session.commit()
    ledger_session.refresh(khata)
    return khata


@pytest.fixture
def sample_vendor(ledger_session, sample_khata):
    """Create a vendor party linked to vendor 7 of the primary schema."""
    party = Party(name="Ali Thread House", type="VENDOR", khata_id=sample_khata.id, vendor_id=7)
    ledger_session.add(party)
    ledger_session.commit()
    ledger_session.refresh(party)
    return party


@pytest.fixture
def sample_customer(ledger_session, sample_khata):
    """Create a customer party linked to customer 9 of the primary schema."""
    party = Party(name="Noor Fabrics", type="CUSTOMER", khata_id=sample_khata.id, customer_id=9)
    ledger_session.add(party)
    ledger_session.commit()
    ledger_session.refresh(party)
    return party


@pytest.fixture
def sample_bill(ledger_session, sample_khata, sample_vendor):
    """Create a PURCHASE bill of 1000 with nothing paid."""
    bill = Bill(
        bill_number="0001",
        khata_id=sample_khata.id,
        party_id=sample_vendor.id,
        bill_type="PURCHASE",
        amount=Decimal("1000.00"),
        paid_amount=Decimal("0.00"),
        status="PENDING",
        bill_date=datetime(2024, 3, 1),
        due_date=datetime(2024, 3, 31),
        description="Cotton yarn"
    )
    ledger_session.add(bill)
    ledger_session.commit()
    ledger_session.refresh(bill)
    return bill
