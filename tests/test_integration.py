"""Integration tests for end-to-end workflows."""

from kakeibo.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: master data → account → add → classify → summary → reconcile."""
    db_path = temp_db.database_path

    # Step 1: Seed subcategories and merchants
    result = cli_runner.invoke(cli, ["--db-path", db_path, "init-master"])
    assert result.exit_code == 0

    # Step 2: Create account
    result = cli_runner.invoke(
        cli, ["--db-path", db_path, "account", "create", "給与口座", "--institution", "三井住友銀行"]
    )
    assert result.exit_code == 0
    assert "(ID: " in result.output

    # Step 3: Add bank transactions
    transactions = [
        ("2025-01-10", "-600", "スターバックス コーヒー", "EXPENSE"),
        ("2025-01-25", "300000", "給与振込 株式会社ABC", "INCOME"),
        ("2025-01-27", "-125000", "ミツイスミトモカード", "REPAYMENT"),
    ]
    for txn_date, amount, description, category in transactions:
        result = cli_runner.invoke(
            cli,
            [
                "--db-path",
                db_path,
                "add",
                "--account",
                "給与口座",
                "--date",
                txn_date,
                "--amount",
                amount,
                "--description",
                description,
                "--category",
                category,
            ],
        )
        assert result.exit_code == 0

    # Step 4: Classify and apply confident results
    result = cli_runner.invoke(
        cli,
        ["--db-path", db_path, "classify-account", "給与口座", "--apply", "--min-confidence", "0.8"],
    )
    assert result.exit_code == 0
    assert "food_cafe | MERCHANT_MATCH" in result.output
    assert "income_salary | KEYWORD_MATCH" in result.output
    assert "Applied" in result.output

    # Step 5: Register the card bill
    result = cli_runner.invoke(
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
            "125000",
        ],
    )
    assert result.exit_code == 0

    # Step 6: Reconcile against the bank account
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            db_path,
            "reconcile",
            "smbc-gold",
            "2025-01",
            "--account",
            "給与口座",
            "--as-of",
            "2025-01-28",
        ],
    )
    assert result.exit_code == 0
    assert "Matched transaction" in result.output
    assert "Payment status: PAID" in result.output

    # Step 7: Nothing needs attention
    result = cli_runner.invoke(cli, ["--db-path", db_path, "alert", "list"])
    assert result.exit_code == 0
    assert "No alerts found" in result.output

    result = cli_runner.invoke(cli, ["--db-path", db_path, "summary", "list"])
    assert "PAID" in result.output
