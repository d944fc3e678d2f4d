"""Tests for the reconcile and alert commands."""

import json
from datetime import date

import pytest

from kakeibo.cli.main import cli
from kakeibo.domain.entities import CategoryType


@pytest.fixture
def bill(temp_db, smbc_summary):
    """Stored January bill of the 三井住友 card."""
    temp_db.create_card_summary(smbc_summary)
    return smbc_summary


def _reconcile(cli_runner, db_path, as_of, *extra):
    return cli_runner.invoke(
        cli,
        [
            "--db-path",
            db_path,
            "reconcile",
            "smbc-gold",
            "2025-01",
            "--account",
            "Test Account",
            "--as-of",
            as_of,
            *extra,
        ],
    )


def test_reconcile_exact_payment(cli_runner, temp_db, sample_account, bill):
    """Test an exact withdrawal marks the bill as paid."""
    temp_db.create_transaction(
        sample_account.id, date(2025, 1, 27), -125000, "ミツイスミトモカード", CategoryType.REPAYMENT
    )

    result = _reconcile(cli_runner, temp_db.database_path, "2025-01-27")

    assert result.exit_code == 0
    assert "Matched transaction" in result.output
    assert "confidence 100" in result.output
    assert "Payment status: PAID" in result.output
    assert "Alert" not in result.output


def test_reconcile_short_payment(cli_runner, temp_db, sample_account, bill):
    temp_db.create_transaction(
        sample_account.id, date(2025, 1, 27), -120000, "ミツイスミトモカード", CategoryType.REPAYMENT
    )

    result = _reconcile(cli_runner, temp_db.database_path, "2025-01-27", "--json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["matched"] is True
    assert data["confidence"] == 90
    assert data["discrepancy"]["difference"] == -5000
    assert data["alertId"] is not None


def test_reconcile_unknown_summary(cli_runner, temp_db, sample_account):
    result = _reconcile(cli_runner, temp_db.database_path, "2025-01-27")

    assert result.exit_code == 1
    assert "not found" in result.output


def test_missing_payment_alert_lifecycle(cli_runner, temp_db, sample_account, bill):
    """Test a missing payment raises an alert that can be read and resolved."""
    result = _reconcile(cli_runner, temp_db.database_path, "2025-01-20", "--json")
    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["matched"] is False
    assert data["discrepancy"]["reason"] == "PAYMENT_NOT_FOUND"
    alert_id = data["alertId"]

    db_path = temp_db.database_path
    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "list", "--min-level", "WARNING"])
    assert result.exit_code == 0
    assert "WARNING" in result.output
    assert "PAYMENT_NOT_FOUND" in result.output
    assert alert_id in result.output

    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "show", alert_id])
    assert result.exit_code == 0
    assert "三井住友カード" in result.output
    assert "* 手動で照合 (MANUAL_MATCH)" in result.output

    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "read", alert_id])
    assert result.exit_code == 0
    assert "is READ" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", db_path, "alert", "resolve", alert_id, "--by", "taro", "--note", "確認済み"]
    )
    assert result.exit_code == 0
    assert "resolved" in result.output

    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "resolve", alert_id])
    assert result.exit_code == 1
    assert "Cannot transition" in result.output

    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "list", "--status", "UNREAD"])
    assert "No alerts found" in result.output


def test_overdue_payment(cli_runner, temp_db, sample_account, bill):
    """Test a bill unpaid more than a week after the due date is critical."""
    result = _reconcile(cli_runner, temp_db.database_path, "2025-02-10")

    assert result.exit_code == 0
    assert "Not matched" in result.output
    assert "Payment status: OVERDUE" in result.output
    assert "Alert [CRITICAL]" in result.output


def test_alert_show_unknown(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "alert", "show", "missing"])
    assert result.exit_code == 1
    assert "not found" in result.output
