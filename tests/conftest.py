"""
Pytest fixtures for the ledger kernel test suite.

Provides:
- In-memory SQLite database sessions (one fresh database per test)
- Seeded currencies, transaction types and accounts
- A journal factory building two-leg journals inside a group
- Captured structured logs
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from ledger_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.domain.dtos import UpdateSettings
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models import (
    Account,
    AccountType,
    Bill,
    Budget,
    JournalLeg,
    TransactionCurrency,
    TransactionGroup,
    TransactionJournal,
    TransactionType,
    TransactionTypeName,
)
from ledger_kernel.services.journal_update_service import JournalUpdateService
from ledger_kernel.services.leg_resolver import LegPair, LegResolver

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

# Owner of every seeded account and journal
TEST_USER_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, update):
            update(journal, {"amount": "0"})
            logs = captured_logs()
            assert any(r["message"] == "amount_invalid" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database for one test."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    """Session bound to the test database; rolled back after the test."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def user_id() -> UUID:
    return TEST_USER_ID


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> UpdateSettings:
    return UpdateSettings(app_timezone="UTC", force_utc=False)


# =============================================================================
# Reference data
# =============================================================================


@pytest.fixture
def currencies(session, test_actor_id) -> dict[str, TransactionCurrency]:
    """EUR, USD and GBP, keyed by code."""
    rows = {}
    for code, name, symbol in (
        ("EUR", "Euro", "€"),
        ("USD", "US Dollar", "$"),
        ("GBP", "British Pound", "£"),
    ):
        currency = TransactionCurrency(
            code=code,
            name=name,
            symbol=symbol,
            decimal_places=2,
            created_by_id=test_actor_id,
        )
        session.add(currency)
        rows[code] = currency
    session.flush()
    return rows


@pytest.fixture
def transaction_types(session, test_actor_id) -> dict[str, TransactionType]:
    """Every known transaction type, keyed by display name."""
    rows = {}
    for member in TransactionTypeName:
        row = TransactionType(type=member.value, created_by_id=test_actor_id)
        session.add(row)
        rows[member.value] = row
    session.flush()
    return rows


@pytest.fixture
def make_account(session, user_id, test_actor_id):
    """Factory for accounts owned by the test user."""

    def _make(name: str, account_type: AccountType, **kwargs) -> Account:
        account = Account(
            user_id=kwargs.pop("owner_id", user_id),
            name=name,
            account_type=account_type.value,
            created_by_id=test_actor_id,
            **kwargs,
        )
        session.add(account)
        session.flush()
        return account

    return _make


@pytest.fixture
def accounts(make_account) -> dict[str, Account]:
    """A small chart of accounts covering every role the tests need."""
    return {
        "checking": make_account("Checking", AccountType.ASSET, iban="NL91ABNA0417164300"),
        "savings": make_account("Savings", AccountType.ASSET, account_number="12-3456"),
        "groceries": make_account("Groceries", AccountType.EXPENSE),
        "rent": make_account("Rent", AccountType.EXPENSE),
        "employer": make_account("Employer", AccountType.REVENUE),
        "car_loan": make_account("Car loan", AccountType.LOAN),
        "mortgage": make_account("House", AccountType.MORTGAGE),
        "opening": make_account("Initial balance for Checking", AccountType.INITIAL_BALANCE),
    }


@pytest.fixture
def make_bill(session, user_id, test_actor_id):
    def _make(name: str) -> Bill:
        bill = Bill(user_id=user_id, name=name, created_by_id=test_actor_id)
        session.add(bill)
        session.flush()
        return bill

    return _make


@pytest.fixture
def make_budget(session, user_id, test_actor_id):
    def _make(name: str) -> Budget:
        budget = Budget(user_id=user_id, name=name, created_by_id=test_actor_id)
        session.add(budget)
        session.flush()
        return budget

    return _make


# =============================================================================
# Journals
# =============================================================================


@pytest.fixture
def make_journal(session, user_id, test_actor_id, currencies, transaction_types, accounts):
    """
    Factory for two-leg journals.

    Usage::

        journal = make_journal("Withdrawal", "checking", "groceries", "45.00")
    """

    def _make(
        type_name: str = "Withdrawal",
        source: str | Account = "checking",
        destination: str | Account = "groceries",
        amount: str = "45.00",
        currency: str = "EUR",
        description: str = "Test journal",
        date: datetime | None = None,
        group: TransactionGroup | None = None,
        order: int = 0,
    ) -> TransactionJournal:
        if group is None:
            group = TransactionGroup(user_id=user_id, created_by_id=test_actor_id)
            session.add(group)

        source_account = accounts[source] if isinstance(source, str) else source
        destination_account = accounts[destination] if isinstance(destination, str) else destination
        primary = currencies[currency]
        value = Decimal(amount)

        journal = TransactionJournal(
            user_id=user_id,
            group=group,
            transaction_type=transaction_types[type_name],
            currency=primary,
            description=description,
            date=date or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc),
            date_tz="UTC",
            order=order,
            created_by_id=test_actor_id,
        )
        journal.legs = [
            JournalLeg(
                account=source_account,
                currency=primary,
                amount=-abs(value),
                created_by_id=test_actor_id,
            ),
            JournalLeg(
                account=destination_account,
                currency=primary,
                amount=abs(value),
                created_by_id=test_actor_id,
            ),
        ]
        session.add(journal)
        session.flush()
        return journal

    return _make


@pytest.fixture
def update_service(session, settings, clock) -> JournalUpdateService:
    return JournalUpdateService(session, settings, clock=clock)


@pytest.fixture
def update(update_service, test_actor_id):
    """Apply an update map to a journal as the test actor."""

    def _update(journal: TransactionJournal, data: dict):
        return update_service.update(journal, data, test_actor_id)

    return _update


@pytest.fixture
def legs(session):
    """Resolve the (source, destination) legs of a journal."""
    resolver = LegResolver(session)

    def _legs(journal: TransactionJournal) -> LegPair:
        return resolver.resolve(journal)

    return _legs
