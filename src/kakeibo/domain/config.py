"""Tunable thresholds for classification, reconciliation and alerting.

Defaults live in the dataclasses. ``load_config`` overlays ``KAKEIBO_*``
environment variables, the same override convention the CLI uses for
``KAKEIBO_DB_PATH``.
"""

import os
from dataclasses import dataclass, field, fields, replace
from typing import Mapping, Optional

from kakeibo.domain.errors import ValidationError

ENV_PREFIX = "KAKEIBO_"


@dataclass(frozen=True)
class ClassificationConfig:
    """Classification confidence tiers and recurrence rules."""

    keyword_exact_confidence: float = 0.9
    keyword_partial_confidence: float = 0.7
    recurring_amount_tolerance: float = 0.01
    recurring_day_window: int = 3
    recurring_min_occurrences: int = 2
    recurring_base_confidence: float = 0.6
    recurring_step_confidence: float = 0.05
    recurring_max_confidence: float = 0.85
    history_lookback_days: int = 400
    batch_max_workers: int = 4


@dataclass(frozen=True)
class ReconciliationConfig:
    """Candidate window, scoring weights and decision thresholds."""

    grace_period_days: int = 3
    amount_tolerance: int = 5
    discrepancy_tolerance: int = 5
    max_amount_deviation_ratio: float = 0.2
    date_decay_days: int = 7
    amount_weight: int = 50
    date_weight: int = 30
    description_weight: int = 20
    high_threshold: int = 90
    low_threshold: int = 50
    processing_lead_days: int = 3


@dataclass(frozen=True)
class AlertConfig:
    """Alert escalation thresholds."""

    large_discrepancy_threshold: int = 10000
    overdue_escalation_days: int = 7
    low_confidence_threshold: float = 0.5


@dataclass(frozen=True)
class KakeiboConfig:
    """All engine settings."""

    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    reconciliation: ReconciliationConfig = field(default_factory=ReconciliationConfig)
    alert: AlertConfig = field(default_factory=AlertConfig)

    def validate(self) -> "KakeiboConfig":
        """Check cross-field invariants and return self.

        Raises:
            ValidationError: If a threshold is out of range
        """
        rec = self.reconciliation
        if not 0 <= rec.low_threshold <= rec.high_threshold <= 100:
            raise ValidationError(
                "Reconciliation thresholds must satisfy 0 <= low <= high <= 100"
            )
        if rec.amount_weight + rec.date_weight + rec.description_weight != 100:
            raise ValidationError("Reconciliation weights must add up to 100")
        if rec.max_amount_deviation_ratio <= 0:
            raise ValidationError("max_amount_deviation_ratio must be positive")
        if rec.amount_tolerance < 0 or rec.discrepancy_tolerance < 0:
            raise ValidationError("Amount tolerances must be non-negative")
        if rec.grace_period_days < 0 or rec.date_decay_days <= 0:
            raise ValidationError("Date windows must be positive")
        cls = self.classification
        if cls.recurring_min_occurrences < 1:
            raise ValidationError("recurring_min_occurrences must be at least 1")
        for f in fields(cls):
            if f.name.endswith("_confidence"):
                value = getattr(cls, f.name)
                if not 0.0 <= value <= 1.0:
                    raise ValidationError(f"{f.name} must be between 0.0 and 1.0")
        if not 0.0 <= self.alert.low_confidence_threshold <= 1.0:
            raise ValidationError("low_confidence_threshold must be between 0.0 and 1.0")
        return self


def _coerce(raw: str, current, name: str):
    try:
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
    except ValueError as e:
        raise ValidationError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw}") from e
    return raw


def _overlay(section, environ: Mapping[str, str]):
    changes = {}
    for f in fields(section):
        key = f"{ENV_PREFIX}{f.name.upper()}"
        if key in environ:
            changes[f.name] = _coerce(environ[key], getattr(section, f.name), f.name)
    return replace(section, **changes) if changes else section


def load_config(environ: Optional[Mapping[str, str]] = None) -> KakeiboConfig:
    """Build the configuration from defaults and environment overrides.

    Args:
        environ: Mapping to read overrides from (defaults to os.environ)

    Returns:
        Validated KakeiboConfig

    Raises:
        ValidationError: If an override cannot be parsed or is out of range
    """
    if environ is None:
        environ = os.environ
    base = KakeiboConfig()
    return KakeiboConfig(
        classification=_overlay(base.classification, environ),
        reconciliation=_overlay(base.reconciliation, environ),
        alert=_overlay(base.alert, environ),
    ).validate()
