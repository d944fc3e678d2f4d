"""Account domain service."""

from typing import TYPE_CHECKING, Optional

from kakeibo.domain.entities import Account as AccountEntity
from kakeibo.domain.errors import ConflictError, ValidationError

if TYPE_CHECKING:
    from kakeibo.database.base import Database


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: "Database"):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, name: str, institution: str) -> int:
        """Create a new account.

        Args:
            name: Account name
            institution: Bank or card issuer name

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If account name already exists
        """
        if not name.strip():
            raise ValidationError("Account name must not be empty")
        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(name=name, institution=institution)

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID."""
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()
