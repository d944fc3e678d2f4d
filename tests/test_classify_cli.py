"""Tests for classification commands."""

import json
from datetime import date

from kakeibo.cli.main import cli
from kakeibo.domain.entities import AlertType, ClassificationReason, CategoryType


def test_classify_merchant(cli_runner, seeded_db):
    """Test classifying a known merchant."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            seeded_db.database_path,
            "classify",
            "スターバックス コーヒー 渋谷店",
            "--amount",
            "-1500",
            "--category",
            "EXPENSE",
        ],
    )

    assert result.exit_code == 0
    assert "food_cafe | MERCHANT_MATCH | confidence 0.95 | Merchant: スターバックス" in result.output


def test_classify_salary(cli_runner, seeded_db):
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            seeded_db.database_path,
            "classify",
            "給与振込 株式会社ABC",
            "--amount",
            "300000",
            "--category",
            "income",
        ],
    )

    assert result.exit_code == 0
    assert "income_salary | KEYWORD_MATCH | confidence 0.90" in result.output


def test_classify_sign_mismatch(cli_runner, seeded_db):
    """Test an income with a negative amount is rejected."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            seeded_db.database_path,
            "classify",
            "給与振込",
            "--amount",
            "-300000",
            "--category",
            "INCOME",
        ],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_classify_without_master_data(cli_runner, temp_db):
    """Test classification fails clearly before init-master."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "classify", "謎", "--amount", "-1", "--category", "EXPENSE"],
    )

    assert result.exit_code == 1
    assert "Default subcategory not found" in result.output


def test_classify_account_apply_and_confirm(cli_runner, seeded_db):
    """Test classifying stored transactions, then overriding one manually."""
    account_id = seeded_db.create_account(name="普通預金", institution="三菱UFJ銀行")
    cafe = seeded_db.create_transaction(
        account_id, date(2025, 1, 10), -500, "スターバックス", CategoryType.EXPENSE
    )
    unknown = seeded_db.create_transaction(
        account_id, date(2025, 1, 11), -700, "謎の支払い", CategoryType.EXPENSE
    )

    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            seeded_db.database_path,
            "classify-account",
            "普通預金",
            "--apply",
            "--min-confidence",
            "0.5",
            "--alerts",
        ],
    )
    assert result.exit_code == 0
    assert "Applied 1 of 2 classifications." in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", seeded_db.database_path, "confirm", str(unknown), "food_dining_out"]
    )
    assert result.exit_code == 0
    assert f"Transaction {unknown} confirmed as 'food_dining_out'" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", seeded_db.database_path, "alert", "list", "--status", "UNREAD"]
    )
    assert AlertType.LOW_CONFIDENCE_CLASSIFICATION.value in result.output

    result = cli_runner.invoke(cli, ["--db-path", seeded_db.database_path, "classify-account", "普通預金"])
    assert result.exit_code == 0
    assert "スターバックス" in result.output
    assert "謎の支払い" not in result.output
    assert str(cafe) in result.output


def test_confirm_wrong_category(cli_runner, seeded_db):
    account_id = seeded_db.create_account(name="普通預金", institution="三菱UFJ銀行")
    txn_id = seeded_db.create_transaction(
        account_id, date(2025, 1, 10), -500, "スターバックス", CategoryType.EXPENSE
    )

    result = cli_runner.invoke(
        cli, ["--db-path", seeded_db.database_path, "confirm", str(txn_id), "income_salary"]
    )

    assert result.exit_code == 1
    assert "cannot be used for a EXPENSE transaction" in result.output


def test_classify_batch(cli_runner, seeded_db, tmp_path):
    """Test a batch request file produces a JSON response in order."""
    request_file = tmp_path / "batch.json"
    request_file.write_text(
        json.dumps(
            {
                "transactions": [
                    {"transactionId": "t1", "description": "ユニクロ 銀座店", "amount": -3990, "mainCategory": "EXPENSE"},
                    {"transactionId": "t2", "description": "給与振込", "amount": 250000, "mainCategory": "INCOME", "date": "2025-01-25"},
                    {"transactionId": "t3", "description": "返金", "amount": 500, "mainCategory": "EXPENSE"},
                ]
            },
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )

    result = cli_runner.invoke(
        cli, ["--db-path", seeded_db.database_path, "classify-batch", str(request_file)]
    )

    assert result.exit_code == 0
    response = json.loads(result.stdout)
    assert response["success"] is False
    assert response["summary"] == {"total": 3, "success": 2, "failure": 1}
    assert [r["transactionId"] for r in response["results"]] == ["t1", "t2", "t3"]
    assert response["results"][0]["data"]["reason"] == ClassificationReason.MERCHANT_MATCH.value
    assert response["results"][1]["data"]["subcategoryId"] == "income_salary"
    assert "error" in response["results"][2]


def test_classify_batch_invalid_json(cli_runner, seeded_db, tmp_path):
    request_file = tmp_path / "batch.json"
    request_file.write_text("{not json", encoding="utf-8")

    result = cli_runner.invoke(
        cli, ["--db-path", seeded_db.database_path, "classify-batch", str(request_file)]
    )

    assert result.exit_code == 1
    assert "Invalid JSON" in result.output
