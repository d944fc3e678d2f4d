"""Tests for transaction commands."""

import pytest
from datetime import date
from kakeibo.cli.main import cli
from kakeibo.domain.entities import CategoryType
from kakeibo.domain.errors import InvalidInputError, NotFoundError


def test_add_transaction(cli_runner, temp_db, sample_account):
    """Test adding a transaction by account ID."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            str(sample_account.id),
            "--date",
            "2025-01-15",
            "--amount",
            "-1500",
            "--description",
            "スターバックス",
            "--category",
            "EXPENSE",
        ],
    )

    assert result.exit_code == 0
    assert "Created transaction" in result.output
    assert "-¥1,500" in result.output


def test_add_transaction_with_account_name(cli_runner, temp_db, sample_account):
    """Test adding a transaction using account name instead of ID."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            "Test Account",
            "--date",
            "today",
            "--amount",
            "¥300,000",
            "--description",
            "給与振込",
            "--category",
            "income",
        ],
    )

    assert result.exit_code == 0
    assert "Category: INCOME" in result.output


def test_add_transaction_sign_mismatch(cli_runner, temp_db, sample_account):
    """Test a positive expense is rejected."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            "Test Account",
            "--date",
            "2025-01-15",
            "--amount",
            "1500",
            "--description",
            "スターバックス",
            "--category",
            "EXPENSE",
        ],
    )

    assert result.exit_code == 1
    assert "not valid for category EXPENSE" in result.output


def test_add_transaction_invalid_amount(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            "Test Account",
            "--date",
            "2025-01-15",
            "--amount",
            "12.5",
            "--description",
            "x",
            "--category",
            "EXPENSE",
        ],
    )

    assert result.exit_code == 1
    assert "Invalid amount format" in result.output


def test_add_transaction_unknown_account(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "add",
            "--account",
            "Nope",
            "--date",
            "2025-01-15",
            "--amount",
            "-100",
            "--description",
            "x",
            "--category",
            "EXPENSE",
        ],
    )

    assert result.exit_code == 1
    assert "not found" in result.output


def test_service_create_and_list(transaction_service, sample_account):
    txn_id = transaction_service.create_transaction(
        account_id=sample_account.id,
        date=date(2025, 1, 15),
        amount=-1500,
        description="スターバックス",
        main_category=CategoryType.EXPENSE,
    )
    txn = transaction_service.get_transaction(txn_id)
    assert txn.amount == -1500
    assert txn.subcategory_id is None
    assert txn.imported_at is not None
    assert transaction_service.list_transactions(
        account_id=sample_account.id, start_date=date(2025, 1, 16)
    ) == []


def test_service_validation(transaction_service, sample_account):
    with pytest.raises(NotFoundError):
        transaction_service.create_transaction(999, date(2025, 1, 15), -1, "x", CategoryType.EXPENSE)
    with pytest.raises(InvalidInputError):
        transaction_service.create_transaction(
            sample_account.id, date(2025, 1, 15), -1, "x", CategoryType.INCOME
        )
