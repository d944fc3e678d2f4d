"""Tests for monthly card summary commands."""

from datetime import date

from kakeibo.cli.main import cli
from kakeibo.domain.entities import CategoryType


def _add_summary(cli_runner, db_path, *extra):
    return cli_runner.invoke(
        cli,
        [
            "--db-path",
            db_path,
            "summary",
            "add",
            "smbc-gold",
            "2025-01",
            "--card-name",
            "三井住友カード",
            "--closing-date",
            "2024-12-15",
            "--due-date",
            "2025-01-27",
            "--total",
            "¥125,000",
            *extra,
        ],
    )


def test_summary_add(cli_runner, temp_db):
    """Test registering a monthly card summary."""
    result = _add_summary(cli_runner, temp_db.database_path)

    assert result.exit_code == 0
    assert "Created summary" in result.output
    assert "Net payment: ¥125,000" in result.output


def test_summary_add_with_discounts(cli_runner, temp_db):
    result = _add_summary(
        cli_runner,
        temp_db.database_path,
        "--discount",
        "ポイント=500",
        "--discount",
        "キャンペーン=1,000",
    )

    assert result.exit_code == 0
    assert "Net payment: ¥123,500" in result.output


def test_summary_add_bad_discount(cli_runner, temp_db):
    result = _add_summary(cli_runner, temp_db.database_path, "--discount", "ポイント")

    assert result.exit_code == 1
    assert "DESCRIPTION=AMOUNT" in result.output


def test_summary_add_due_before_closing(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "summary",
            "add",
            "jcb",
            "2025-01",
            "--card-name",
            "JCBカード",
            "--closing-date",
            "2025-01-15",
            "--due-date",
            "2025-01-10",
            "--total",
            "1000",
        ],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_summary_add_duplicate(cli_runner, temp_db):
    """Test a card has one summary per billing month."""
    assert _add_summary(cli_runner, temp_db.database_path).exit_code == 0

    result = _add_summary(cli_runner, temp_db.database_path)

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_summary_list(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "summary", "list"])
    assert result.exit_code == 0
    assert "No card summaries found" in result.output

    _add_summary(cli_runner, temp_db.database_path)
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "summary", "list", "--card", "smbc-gold"]
    )

    assert result.exit_code == 0
    assert "smbc-gold" in result.output
    assert "2025-01" in result.output
    assert "PENDING" in result.output


def test_summary_add_with_closing_and_payment_days(cli_runner, temp_db):
    """Test the bill dates are worked out from the card's closing and payment days."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "summary",
            "add",
            "smbc-gold",
            "2024-02",
            "--card-name",
            "三井住友カード",
            "--closing-day",
            "30",
            "--payment-day",
            "31",
            "--total",
            "50000",
        ],
    )

    assert result.exit_code == 0
    assert "Due: 2024-03-31" in result.output
    assert temp_db.get_card_summary("smbc-gold", "2024-02").closing_date == date(2024, 2, 29)


def test_summary_add_from_card_account(cli_runner, temp_db):
    """Test the billed total is summed from the card account's transactions."""
    card_account = temp_db.create_account(name="楽天カード", institution="楽天カード")
    temp_db.create_transaction(card_account, date(2025, 1, 31), -4000, "スーパー", CategoryType.EXPENSE)
    temp_db.create_transaction(card_account, date(2025, 2, 3), -2500, "カフェ", CategoryType.EXPENSE)
    temp_db.create_transaction(card_account, date(2025, 2, 14), -6000, "ドラッグストア", CategoryType.EXPENSE)

    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "summary",
            "add",
            "rakuten",
            "2025-02",
            "--card-name",
            "楽天カード",
            "--closing-day",
            "0",
            "--payment-day",
            "27",
            "--from-account",
            "楽天カード",
            "--discount",
            "ポイント=500",
        ],
    )

    assert result.exit_code == 0
    assert "Line items: 2 (total ¥8,500)" in result.output
    assert "Net payment: ¥8,000" in result.output
    assert "Due: 2025-03-27" in result.output


def test_summary_add_from_account_needs_days(cli_runner, temp_db):
    temp_db.create_account(name="楽天カード", institution="楽天カード")
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "summary",
            "add",
            "rakuten",
            "2025-02",
            "--card-name",
            "楽天カード",
            "--from-account",
            "楽天カード",
        ],
    )

    assert result.exit_code == 1
    assert "--closing-day" in result.output


def test_summary_add_needs_total(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "summary",
            "add",
            "rakuten",
            "2025-02",
            "--card-name",
            "楽天カード",
            "--closing-date",
            "2025-02-28",
            "--due-date",
            "2025-03-27",
        ],
    )

    assert result.exit_code == 1
    assert "Either --total or --from-account is required" in result.output
