"""Shared pytest fixtures for myfinance tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from myfinance.database.factories import create_sqlite_database
from myfinance.domain.account import AccountService
from myfinance.domain.category import CategoryService
from myfinance.domain.exchange import CurrencyConverter, FixedRateSource
from myfinance.domain.ofx_import import OFXImportService
from myfinance.domain.requests import CreateAccountRequest
from myfinance.domain.transaction import TransactionService
from myfinance.domain.user import UserService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_service(temp_db):
    """Create a UserService with a cheap bcrypt cost."""
    return UserService(temp_db, rounds=4)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def converter():
    """Create a converter backed by the fixed rate table."""
    return CurrencyConverter(FixedRateSource())


@pytest.fixture
def transaction_service(temp_db, converter):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db, converter)


@pytest.fixture
def ofx_service(temp_db):
    """Create an OFXImportService with a temporary database."""
    return OFXImportService(temp_db)


@pytest.fixture
def sample_user(temp_db):
    """Create a user without default categories; returns the user ID."""
    return temp_db.create_user(name="Ana", email="ana@example.com", password_hash="x")


@pytest.fixture
def other_user(temp_db):
    """Create a second user for isolation tests; returns the user ID."""
    return temp_db.create_user(name="Bruno", email="bruno@example.com", password_hash="x")


@pytest.fixture
def seeded_user(sample_user, category_service):
    """Sample user with the default categories seeded."""
    category_service.seed_default_categories(sample_user)
    return sample_user


def _create_account(account_service, user_id, name, currency, account_type="expense", initial="0"):
    return account_service.create_account(
        user_id,
        CreateAccountRequest(
            name=name,
            currency=currency,
            type=account_type,
            initial_value=Decimal(initial),
            due_date=date(2024, 1, 1),
            competence_date=date(2024, 1, 1),
        ),
    )


@pytest.fixture
def brl_account(account_service, seeded_user):
    """A BRL account with a zero opening balance."""
    return _create_account(account_service, seeded_user, "Conta Corrente", "BRL")


@pytest.fixture
def brl_savings(account_service, seeded_user):
    """A second BRL account."""
    return _create_account(account_service, seeded_user, "Poupança", "BRL")


@pytest.fixture
def usd_account(account_service, seeded_user):
    """A USD account with a zero opening balance."""
    return _create_account(account_service, seeded_user, "Wise USD", "USD")


@pytest.fixture
def expense_category(category_service, seeded_user):
    """The seeded 'Outros' expense category."""
    return category_service.get_category_by_name("Outros", "expense", seeded_user)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
