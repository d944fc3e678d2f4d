"""Payment status lifecycle of a monthly card bill."""

from datetime import date

from kakeibo.domain import errors
from kakeibo.domain.entities import PaymentStatus, ReconciliationResult
from kakeibo.domain.errors import InvalidTransitionError

# Automatic transitions. MANUAL_CONFIRMED and CANCELLED are reachable from
# every state and handled in can_transition.
ALLOWED_TRANSITIONS = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.OVERDUE}),
    PaymentStatus.PROCESSING: frozenset(
        {
            PaymentStatus.PAID,
            PaymentStatus.PARTIAL,
            PaymentStatus.DISPUTED,
            PaymentStatus.OVERDUE,
        }
    ),
    PaymentStatus.PAID: frozenset(),
    PaymentStatus.PARTIAL: frozenset(),
    PaymentStatus.DISPUTED: frozenset(),
    PaymentStatus.OVERDUE: frozenset(),
    PaymentStatus.MANUAL_CONFIRMED: frozenset(),
    PaymentStatus.CANCELLED: frozenset(),
}

USER_TRIGGERED = frozenset({PaymentStatus.MANUAL_CONFIRMED, PaymentStatus.CANCELLED})


def can_transition(current: PaymentStatus, target: PaymentStatus) -> bool:
    """Return True if the lifecycle allows moving from current to target."""
    if current == target:
        return False
    if target in USER_TRIGGERED:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def transition(current: PaymentStatus, target: PaymentStatus) -> PaymentStatus:
    """Validate a status change and return the new status.

    Raises:
        InvalidTransitionError: If the change is not allowed
    """
    if not can_transition(current, target):
        raise InvalidTransitionError(
            errors.invalid_transition("payment status", current.value, target.value)
        )
    return target


def _outcome(result: ReconciliationResult) -> PaymentStatus:
    discrepancy = result.discrepancy
    if discrepancy is None:
        return PaymentStatus.PAID
    if discrepancy.actual_amount < discrepancy.expected_amount:
        return PaymentStatus.PARTIAL
    return PaymentStatus.DISPUTED


def derive_payment_status(
    current: PaymentStatus,
    result: ReconciliationResult,
    due_date: date,
    as_of: date,
    processing_lead_days: int = 3,
) -> PaymentStatus:
    """Compute the automatic next status after a reconciliation run.

    A PENDING bill whose payment was found passes through PROCESSING
    implicitly. Settled and user-triggered states are never left.

    Args:
        current: Current status of the bill
        result: Reconciliation outcome for the bill
        due_date: Payment due date
        as_of: Date the reconciliation ran
        processing_lead_days: Days before the due date from which an
            unmatched bill counts as PROCESSING

    Returns:
        The new status, or current when nothing changes
    """
    if not ALLOWED_TRANSITIONS[current]:
        return current

    if result.matched:
        return _outcome(result)

    if as_of > due_date:
        return PaymentStatus.OVERDUE
    if current == PaymentStatus.PENDING and (due_date - as_of).days <= processing_lead_days:
        return PaymentStatus.PROCESSING
    return current
