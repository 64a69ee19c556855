"""Shared test fixtures."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from datetime import date
from decimal import Decimal
import uuid

from app.database import Base
from app.dependencies import get_db
from app.main import app
from app.models.household import Household
from app.models.account import Account, AccountType
from app.models.category import Category
from app.models.transaction import Transaction
from app.models.recurring import RecurringPattern, Direction, Frequency


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test using in-memory SQLite."""
    # Use StaticPool to ensure all connections use the same in-memory database
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def household(db_session):
    """Create a sample household."""
    household = Household(id=str(uuid.uuid4()), name="Test Household")
    db_session.add(household)
    db_session.commit()
    db_session.refresh(household)
    return household


@pytest.fixture
def other_household(db_session):
    """Create a second household to check scoping."""
    household = Household(id=str(uuid.uuid4()), name="Neighbours")
    db_session.add(household)
    db_session.commit()
    db_session.refresh(household)
    return household


@pytest.fixture
def headers(household):
    """Request headers carrying the sample household scope."""
    return {"X-Household-ID": household.id}


@pytest.fixture
def sample_account(db_session, household):
    """Create a sample account."""
    account = Account(id=str(uuid.uuid4()), household_id=household.id, name="Test Checking")
    account.account_type = AccountType.bank
    account.is_active = True

    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture
def sample_category(db_session):
    """Create a sample category."""
    category = Category(
        id=str(uuid.uuid4()),
        name="Subscriptions",
        color="#22c55e",
        icon="repeat",
        is_system=True
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def add_transaction(db_session, household, sample_account):
    """Factory that stores a transaction for the sample household."""
    def _add(
        txn_date,
        amount,
        description,
        category_id=None,
        account_id=None,
        household_id=None,
        is_recurring=False,
    ):
        txn = Transaction(
            id=str(uuid.uuid4()),
            household_id=household_id or household.id,
            date=txn_date,
            amount=Decimal(amount),
            description=description,
            category_id=category_id,
            account_id=account_id or sample_account.id,
            is_recurring=is_recurring,
        )
        db_session.add(txn)
        db_session.commit()
        db_session.refresh(txn)
        return txn

    return _add


@pytest.fixture
def sample_pattern(db_session, household, sample_account, sample_category):
    """Create a sample (unconfirmed) Netflix pattern."""
    pattern = RecurringPattern(
        id=str(uuid.uuid4()),
        household_id=household.id,
        description="netflix",
        amount=Decimal("-50.50"),
        direction=Direction.expense,
        frequency=Frequency.monthly,
        category_id=sample_category.id,
        account_id=sample_account.id,
        last_seen_date=date(2024, 3, 6),
        occurrences=3,
    )
    db_session.add(pattern)
    db_session.commit()
    db_session.refresh(pattern)
    return pattern
