"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class InvalidInputError(ValidationError):
    """Upstream data is malformed (amount/category mismatch, empty text, bad totals)."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class InvalidTransitionError(ConflictError):
    """A status change is not allowed by the lifecycle rules."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def subcategory_not_found(subcategory_id: str) -> str:
    """Return message for missing subcategory."""
    return f"Subcategory '{subcategory_id}' not found"


def default_subcategory_not_found(category_type: str) -> str:
    """Return message when a category has no DEFAULT subcategory."""
    return f"Default subcategory not found for category: {category_type}"


def card_summary_not_found(card_id: str, billing_month: str) -> str:
    """Return message for missing monthly card summary."""
    return f"Monthly card summary for card '{card_id}' and month {billing_month} not found"


def alert_not_found(alert_id: str) -> str:
    """Return message for missing alert."""
    return f"Alert '{alert_id}' not found"


def amount_sign_mismatch(amount: int, category_type: str) -> str:
    """Return message when the amount sign contradicts the main category."""
    return f"Amount {amount} is not valid for category {category_type}"


def category_type_mismatch(subcategory_id: str, expected: str, actual: str) -> str:
    """Return message when a subcategory belongs to another category type."""
    return (
        f"Subcategory '{subcategory_id}' has type {actual} "
        f"and cannot be used for a {expected} transaction"
    )


def invalid_transition(kind: str, current: str, target: str) -> str:
    """Return message for a rejected lifecycle transition."""
    return f"Cannot transition {kind} from {current} to {target}"


def duplicate_merchant_key(key: str, first_id: str, second_id: str) -> str:
    """Return message when two merchants claim the same name or alias."""
    return f"Merchant alias '{key}' is used by both '{first_id}' and '{second_id}'"
