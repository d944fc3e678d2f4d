"""Transaction domain service."""

from datetime import date
from typing import TYPE_CHECKING, Optional

from kakeibo.domain import errors
from kakeibo.domain.classification import validate_request
from kakeibo.domain.entities import CategoryType, ClassificationRequest, Transaction
from kakeibo.domain.errors import NotFoundError

if TYPE_CHECKING:
    from kakeibo.database.base import Database


class TransactionService:
    """Service for recording transactions."""

    def __init__(self, db: "Database"):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: int,
        description: str,
        main_category: CategoryType,
    ) -> int:
        """Record a transaction.

        The amount/category combination is checked with the same rules the
        classifier applies, so stored transactions can always be classified.

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account doesn't exist
            InvalidInputError: If the description is empty or the amount
                sign contradicts the main category
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))
        validate_request(
            ClassificationRequest(description=description, amount=amount, main_category=main_category)
        )
        return self.db.create_transaction(
            account_id=account_id,
            date=date,
            amount=amount,
            description=description,
            main_category=main_category,
        )

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters."""
        return self.db.list_transactions(
            account_id=account_id, start_date=start_date, end_date=end_date
        )
