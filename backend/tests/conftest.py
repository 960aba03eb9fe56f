"""
Pytest fixtures for cashbook backend tests.

Provides an in-memory database, a test client, and a factory for seeding
money-movement events at store-local times.
"""

from datetime import date, datetime, time, timedelta

import pytest

from cashbook import create_app
from cashbook.extensions import db
from cashbook.models import (
    User,
    Sale,
    CreditPayment,
    Refund,
    Exchange,
    Expense,
    SupplierPayment,
    BankDeposit,
)
from cashbook.models.events import PAYMENT_CASH, SOURCE_CASH_REGISTER
from cashbook.time_utils import utcnow


STORE_OFFSET = timedelta(hours=3)

# Fixed business day used across tests (store-local)
DAY = date(2026, 10, 19)


def local_ts(business_date: date, hour: int = 12, minute: int = 0) -> datetime:
    """UTC-naive timestamp for a store-local wall-clock time."""
    return datetime.combine(business_date, time(hour, minute)) - STORE_OFFSET


class EventFactory:
    """Seeds event-source rows the way the CRUD screens would."""

    def __init__(self, session):
        self.session = session
        self._receipt_seq = 0

    def _add(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def _receipt(self) -> str:
        self._receipt_seq += 1
        return f"RCP-{self._receipt_seq:05d}"

    def sale(self, amount, business_date=DAY, *, hour=12, minute=0, method=PAYMENT_CASH, at=None, deleted=False):
        created_at = at if at is not None else local_ts(business_date, hour, minute)
        return self._add(Sale(
            receipt_number=self._receipt(),
            total_cents=amount,
            payment_method=method,
            created_at=created_at,
            deleted_at=utcnow() if deleted else None,
        ))

    def credit_payment(self, amount, business_date=DAY, *, hour=12, method=PAYMENT_CASH):
        return self._add(CreditPayment(
            credit_sale_ref="CS-1",
            amount_cents=amount,
            payment_method=method,
            payment_date=local_ts(business_date, hour),
        ))

    def refund(self, amount, business_date=DAY, *, hour=12, deleted=False):
        return self._add(Refund(
            receipt_number=self._receipt(),
            amount_cents=amount,
            reason="Faulty unit",
            created_at=local_ts(business_date, hour),
            deleted_at=utcnow() if deleted else None,
        ))

    def exchange(self, business_date=DAY, *, top_up=0, refund_given=0):
        return self._add(Exchange(
            original_receipt_number="RCP-00001",
            exchange_type="exchange" if top_up or not refund_given else "refund",
            amount_paid_cents=top_up,
            refund_given_cents=refund_given,
            payment_method=PAYMENT_CASH,
            cash_date=business_date,
        ))

    def expense(self, amount, business_date=DAY, *, source=SOURCE_CASH_REGISTER):
        return self._add(Expense(
            description="Transport",
            category="transport",
            amount_cents=amount,
            payment_method=PAYMENT_CASH,
            payment_source=source,
            expense_date=business_date,
        ))

    def supplier_payment(self, amount, business_date=DAY, *, source=SOURCE_CASH_REGISTER):
        return self._add(SupplierPayment(
            supplier_name="Kampala Phones Ltd",
            amount_cents=amount,
            payment_method=PAYMENT_CASH,
            payment_source=source,
            payment_date=business_date,
        ))

    def deposit(self, amount, business_date=DAY, *, bank_name="Test Bank"):
        return self._add(BankDeposit(
            amount_cents=amount,
            bank_name=bank_name,
            deposit_date=business_date,
            created_at=utcnow(),
        ))


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_UTC_OFFSET': '+03:00',
        'LEDGER_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def events(db_session):
    return EventFactory(db_session)


@pytest.fixture(scope='function')
def cashier(db_session):
    user = User(username="cashier", display_name="Front Counter", is_active=True)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def bank(db_session):
    from cashbook.services import deposit_service
    return deposit_service.configure_bank("Test Bank", "0100-2233-44")


@pytest.fixture(scope='function')
def scenario_a(events):
    """
    opening=0; cash sales=100,000; credit cash collections=20,000;
    refunds=5,000; cash expenses=10,000 -> closing 105,000
    """
    events.sale(60_000, hour=10)
    events.sale(40_000, hour=15)
    events.credit_payment(20_000)
    events.refund(5_000)
    events.expense(10_000)
    return DAY
