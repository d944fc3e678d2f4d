"""Shared pytest fixtures for kakeibo tests."""

import tempfile
import os
from datetime import date
import pytest

from kakeibo.cli.commands.init_master import initial_merchants, initial_subcategories
from kakeibo.database.factories import create_sqlite_database
from kakeibo.domain.account import AccountService
from kakeibo.domain.catalog import ClassificationContext, MerchantDirectory, SubcategoryCatalog
from kakeibo.domain.entities import MonthlyCardSummary, Transaction, CategoryType
from kakeibo.domain.master_data import MasterDataService
from kakeibo.domain.transaction import TransactionService


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
def seeded_db(temp_db):
    """Temporary database with the default subcategories and merchants."""
    MasterDataService(temp_db).seed(initial_subcategories(), initial_merchants())
    return temp_db


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    account_id = account_service.create_account(name="Test Account", institution="Test Bank")
    return account_service.get_account(account_id)


@pytest.fixture
def catalog():
    """Subcategory catalog built from the seed data."""
    return SubcategoryCatalog(initial_subcategories())


@pytest.fixture
def directory():
    """Merchant directory built from the seed data."""
    return MerchantDirectory(initial_merchants())


@pytest.fixture
def context(catalog, directory):
    """Classification context without history."""
    return ClassificationContext(catalog=catalog, directory=directory)


@pytest.fixture
def empty_directory_context(catalog):
    """Classification context with no merchants registered."""
    return ClassificationContext(catalog=catalog, directory=MerchantDirectory([]))


@pytest.fixture
def smbc_summary():
    """January bill of a 三井住友 card: ¥125,000 due 2025-01-27."""
    return MonthlyCardSummary(
        card_id="smbc-gold",
        card_name="三井住友カード",
        billing_month="2025-01",
        closing_date=date(2024, 12, 15),
        payment_due_date=date(2025, 1, 27),
        total_amount=125000,
    )


@pytest.fixture
def make_transaction():
    """Factory for bank transactions used in reconciliation tests."""

    def _make(
        txn_id,
        txn_date,
        amount,
        description="口座振替",
        main_category=CategoryType.REPAYMENT,
        **kwargs,
    ):
        return Transaction(
            id=txn_id,
            account_id=1,
            date=txn_date,
            amount=amount,
            description=description,
            main_category=main_category,
            **kwargs,
        )

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
