"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from kakeibo.domain.entities import (
    Account,
    Alert,
    AlertStatus,
    CategoryType,
    Merchant,
    MonthlyCardSummary,
    Subcategory,
    Transaction,
)


class Database(ABC):
    """Abstract database interface for kakeibo."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, institution: str) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    # Subcategory operations
    @abstractmethod
    def save_subcategory(self, subcategory: Subcategory) -> None:
        """Insert or update a subcategory."""
        pass

    @abstractmethod
    def get_subcategory(self, subcategory_id: str) -> Optional[Subcategory]:
        """Get subcategory by ID."""
        pass

    @abstractmethod
    def list_subcategories(self, category_type: Optional[CategoryType] = None) -> list[Subcategory]:
        """List subcategories, optionally filtered by category type."""
        pass

    # Merchant directory
    @abstractmethod
    def save_merchant(self, merchant: Merchant) -> None:
        """Insert or update a merchant."""
        pass

    @abstractmethod
    def list_merchants(self) -> list[Merchant]:
        """List all merchants."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        date: date,
        amount: int,
        description: str,
        main_category: CategoryType,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, in date order."""
        pass

    @abstractmethod
    def recent_transactions(
        self, account_id: int, lookback_days: int, before: date
    ) -> list[Transaction]:
        """Transactions of an account dated within lookback_days up to before."""
        pass

    @abstractmethod
    def transactions_in_window(self, account_id: int, start: date, end: date) -> list[Transaction]:
        """Transactions of an account dated from start through end."""
        pass

    @abstractmethod
    def update_transaction_classification(self, transaction: Transaction) -> None:
        """Store subcategory, confidence, reason, merchant and confirmation."""
        pass

    # Card summary operations
    @abstractmethod
    def create_card_summary(self, summary: MonthlyCardSummary) -> int:
        """Store a monthly card summary. Returns summary ID."""
        pass

    @abstractmethod
    def get_card_summary(self, card_id: str, billing_month: str) -> Optional[MonthlyCardSummary]:
        """Get the summary of a card for a billing month."""
        pass

    @abstractmethod
    def list_card_summaries(self, card_id: Optional[str] = None) -> list[MonthlyCardSummary]:
        """List card summaries, optionally for one card."""
        pass

    @abstractmethod
    def update_card_summary_status(self, summary: MonthlyCardSummary) -> None:
        """Store the payment status of a summary."""
        pass

    # Alert operations
    @abstractmethod
    def save_alert(self, alert: Alert) -> None:
        """Store a new alert."""
        pass

    @abstractmethod
    def get_alert(self, alert_id: str) -> Optional[Alert]:
        """Get alert by ID."""
        pass

    @abstractmethod
    def list_alerts(self, status: Optional[AlertStatus] = None) -> list[Alert]:
        """List alerts, optionally filtered by status."""
        pass

    @abstractmethod
    def list_alerts_for(self, card_id: str, billing_month: str) -> list[Alert]:
        """List the alerts raised for one card bill."""
        pass

    @abstractmethod
    def update_alert(self, alert: Alert) -> None:
        """Store an alert's content, status and resolution fields."""
        pass
