"""Tests for configuration loading."""

import pytest

from kakeibo.domain.config import KakeiboConfig, ReconciliationConfig, load_config
from kakeibo.domain.errors import ValidationError


def test_defaults():
    """Test the defaults with no overrides."""
    config = load_config({})
    assert config == KakeiboConfig()
    assert config.reconciliation.high_threshold == 90
    assert config.reconciliation.low_threshold == 50
    assert config.reconciliation.grace_period_days == 3
    assert config.alert.large_discrepancy_threshold == 10000
    assert config.alert.overdue_escalation_days == 7
    assert config.classification.keyword_exact_confidence == 0.9


def test_environment_overrides():
    """Test KAKEIBO_* variables override matching fields."""
    config = load_config(
        {
            "KAKEIBO_GRACE_PERIOD_DAYS": "5",
            "KAKEIBO_MAX_AMOUNT_DEVIATION_RATIO": "0.1",
            "KAKEIBO_LOW_CONFIDENCE_THRESHOLD": "0.4",
            "KAKEIBO_DB_PATH": "/tmp/ignored.db",
        }
    )
    assert config.reconciliation.grace_period_days == 5
    assert config.reconciliation.max_amount_deviation_ratio == 0.1
    assert config.alert.low_confidence_threshold == 0.4


def test_load_config_reads_os_environ(monkeypatch):
    monkeypatch.setenv("KAKEIBO_HIGH_THRESHOLD", "95")
    assert load_config().reconciliation.high_threshold == 95


def test_unparseable_override():
    with pytest.raises(ValidationError, match="KAKEIBO_AMOUNT_TOLERANCE"):
        load_config({"KAKEIBO_AMOUNT_TOLERANCE": "five"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"low_threshold": 95},
        {"amount_weight": 60},
        {"max_amount_deviation_ratio": 0},
        {"date_decay_days": 0},
    ],
)
def test_validate_rejects_inconsistent_reconciliation(overrides):
    config = KakeiboConfig(reconciliation=ReconciliationConfig(**overrides))
    with pytest.raises(ValidationError):
        config.validate()


def test_validate_rejects_bad_confidence():
    with pytest.raises(ValidationError):
        load_config({"KAKEIBO_KEYWORD_EXACT_CONFIDENCE": "1.5"})
