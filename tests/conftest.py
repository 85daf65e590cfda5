"""
Pytest fixtures for backend tests.

Usage:
    pytest tests/ --cov=. --cov-report=html
"""
import os
import pytest
from datetime import date
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["NOTIFY_WEBHOOK_URL"] = ""
os.environ["BONUS_TIERS"] = ""

from database import Base, get_db
from dependencies import get_notifier
from main import app
from models import Branch, DailyRevenue, Employee, EmployeeRevenue
from services.accounting import calculate_total, money_sum, to_money
from services.bonus_repository import BonusRepository


# In-memory SQLite for fast tests (no external DB dependency)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class RecordingNotifier:
    """Stands in for WebhookNotifier; keeps every message instead of posting it."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def notify(self, recipients, subject, body):
        if self.fail:
            raise RuntimeError("webhook unreachable")
        self.sent.append({"recipients": list(recipients), "subject": subject, "body": body})
        return True


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.
    Tables are created before and dropped after each test.
    """
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def repository(db_session: Session) -> BonusRepository:
    return BonusRepository(db_session)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db_session: Session, notifier: RecordingNotifier) -> Generator[TestClient, None, None]:
    """
    FastAPI test client with overridden database and notifier dependencies.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def branch(db_session: Session) -> Branch:
    """Active branch with a manager address."""
    branch = Branch(id=1, name="Olaya", is_active=True, manager_email="olaya.manager@example.com")
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture
def second_branch(db_session: Session) -> Branch:
    branch = Branch(id=2, name="Malqa", is_active=True, manager_email=None)
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture
def employees(db_session: Session, branch: Branch) -> list:
    """Two active employees of the sample branch."""
    staff = [
        Employee(id=1, branch_id=branch.id, employee_code="E001", name="Ahmed", is_active=True),
        Employee(id=2, branch_id=branch.id, employee_code="E002", name="Sara", is_active=True),
    ]
    db_session.add_all(staff)
    db_session.commit()
    return staff


@pytest.fixture
def add_daily_revenue(db_session: Session):
    """
    Factory inserting a matched daily revenue entry.

    Usage:
        add_daily_revenue(branch_id=1, revenue_date=date(2025, 3, 3),
                          contributions={1: "500", 2: "300"})

    Contributions are booked as cash; the entry's network is zero.
    """
    def _add(branch_id: int, revenue_date: date, contributions: dict) -> DailyRevenue:
        lines = [
            EmployeeRevenue(
                employee_id=employee_id,
                cash=to_money(amount),
                network=Decimal("0.00"),
                total=to_money(amount),
            )
            for employee_id, amount in contributions.items()
        ]
        employee_total = money_sum(line.total for line in lines)
        revenue = DailyRevenue(
            branch_id=branch_id,
            revenue_date=revenue_date,
            cash=employee_total,
            network=Decimal("0.00"),
            total=calculate_total(employee_total, 0),
            balance=Decimal("0.00"),
            employee_total=employee_total,
            is_matched=True,
            employee_revenues=lines,
        )
        db_session.add(revenue)
        db_session.commit()
        return revenue

    return _add
