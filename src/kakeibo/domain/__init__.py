"""Domain layer for kakeibo application."""

from kakeibo.domain.alert import AlertGenerator, AlertService
from kakeibo.domain.classification import ClassificationOrchestrator, ClassificationService
from kakeibo.domain.reconciliation import ReconciliationMatcher, ReconciliationService

__all__ = [
    "AlertGenerator",
    "AlertService",
    "ClassificationOrchestrator",
    "ClassificationService",
    "ReconciliationMatcher",
    "ReconciliationService",
]
