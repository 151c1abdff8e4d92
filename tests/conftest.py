"""Pytest fixtures for testing"""

import uuid
import pytest
from datetime import date
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from barber_ledger.api.main import create_app
from barber_ledger.api.dependencies import get_today
from barber_ledger.infrastructure.database.models import Base
from barber_ledger.infrastructure.database.session import get_db
from barber_ledger.domain.models import (
    CreditSale,
    Expense,
    Installment,
    InstallmentStatus,
    PaymentMethod,
    Transaction,
)
from factories import make_installment, make_sale


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed "today" for every API test
TODAY = date(2024, 2, 15)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned business date"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def three_part_sale() -> CreditSale:
    """R$ 100,00 in 3 monthly installments from 2024-01-10, nothing paid"""
    return make_sale(
        [
            make_installment(1, 3333, date(2024, 1, 10)),
            make_installment(2, 3333, date(2024, 2, 10)),
            make_installment(3, 3334, date(2024, 3, 10)),
        ]
    )


@pytest.fixture
def march_first_records() -> tuple[List[Transaction], List[Installment], List[Expense]]:
    """One cash sale, one paid installment and one expense, all on 2024-03-01"""
    transactions = [
        Transaction(
            id=uuid.uuid4(),
            date=date(2024, 3, 1),
            client_name="Carlos",
            description="Corte + barba",
            payment_method="pix",
            value_cents=5000,
            subtotal_cents=5000,
        )
    ]
    installments = [
        make_installment(
            3,
            3334,
            date(2024, 3, 10),
            status=InstallmentStatus.PAID,
            paid_date=date(2024, 3, 1),
            payment_method=PaymentMethod.CASH,
        )
    ]
    expenses = [
        Expense(id=uuid.uuid4(), date=date(2024, 3, 1), amount_cents=1000, description="Lâminas", category="supplies")
    ]
    return transactions, installments, expenses
