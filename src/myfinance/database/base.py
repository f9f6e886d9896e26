"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date

# Import entities directly; domain/__init__.py resolves services lazily
from myfinance.domain.entities import (
    User,
    Account,
    Category,
    Transaction,
)

# Fields a partial transaction update may touch. Identity fields (id,
# user_id, created_at) and the transfer link are absent.
MUTABLE_TRANSACTION_FIELDS = frozenset(
    {
        "description",
        "amount",
        "type",
        "category_id",
        "account_id",
        "due_date",
        "competence_date",
        "is_paid",
        "observation",
        "is_recurring",
        "recurring_type",
        "installments",
        "current_installment",
        "parent_transaction_id",
    }
)


class Database(ABC):
    """Abstract database interface for myfinance.

    Every read and write on user data is scoped by ``user_id``; the only
    exceptions are system categories (``user_id`` of None).
    """

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

    @abstractmethod
    def unit_of_work(self) -> AbstractContextManager[None]:
        """Group several writes into one all-or-nothing commit.

        Writes inside the block are only committed when the outermost block
        exits cleanly; any exception rolls all of them back.
        """
        pass

    # User operations
    @abstractmethod
    def create_user(self, name: str, email: str, password_hash: str) -> str:
        """Create a user. Returns user ID."""
        pass

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        user_id: str,
        name: str,
        currency: str,
        account_type: str,
        color: str = "",
        is_active: bool = True,
    ) -> str:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: str, user_id: str) -> Optional[Account]:
        """Get a live account owned by the user."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str) -> list[Account]:
        """List the user's live accounts ordered by name."""
        pass

    @abstractmethod
    def update_account(
        self,
        account_id: str,
        user_id: str,
        name: Optional[str] = None,
        currency: Optional[str] = None,
        color: Optional[str] = None,
        account_type: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update the given account fields; None leaves a field unchanged."""
        pass

    @abstractmethod
    def soft_delete_account(self, account_id: str, user_id: str) -> None:
        """Mark an account as deleted."""
        pass

    @abstractmethod
    def has_transactions_by_account(self, account_id: str, user_id: str) -> bool:
        """Check if any live transaction references the account."""
        pass

    @abstractmethod
    def get_opening_balance_transaction(self, account_id: str, user_id: str) -> Optional[Transaction]:
        """Get the earliest live opening-balance transaction of an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        category_type: str,
        user_id: Optional[str],
        description: str = "",
        color: str = "",
        icon: str = "",
        parent_id: Optional[str] = None,
        visible: bool = True,
        is_active: bool = True,
    ) -> str:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: str) -> Optional[Category]:
        """Get a live category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str, category_type: str, user_id: str) -> Optional[Category]:
        """Get a live user category by exact name and type."""
        pass

    @abstractmethod
    def list_categories(self, user_id: str) -> list[Category]:
        """List the user's live categories ordered by name."""
        pass

    @abstractmethod
    def list_categories_by_type(self, user_id: str, category_type: str) -> list[Category]:
        """List the user's live categories of one type."""
        pass

    @abstractmethod
    def list_subcategories(self, parent_id: str, user_id: str) -> list[Category]:
        """List live direct children of a category."""
        pass

    @abstractmethod
    def list_subcategories_including_deleted(self, parent_id: str) -> list[Category]:
        """List all direct children of a category, soft-deleted ones included."""
        pass

    @abstractmethod
    def update_category(self, category_id: str, **fields: Any) -> None:
        """Update category fields (name, description, color, icon, is_active, visible)."""
        pass

    @abstractmethod
    def soft_delete_category(self, category_id: str) -> None:
        """Mark a category as deleted."""
        pass

    @abstractmethod
    def hard_delete_category(self, category_id: str) -> None:
        """Permanently remove a category row."""
        pass

    @abstractmethod
    def get_transfer_category(self) -> Optional[Category]:
        """Find the live system transfer category."""
        pass

    @abstractmethod
    def ensure_transfer_category(self) -> Category:
        """Get the system transfer category, creating it on first use."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        description: str,
        amount: int,
        transaction_type: str,
        category_id: str,
        account_id: str,
        due_date: date,
        competence_date: date,
        is_paid: bool = False,
        observation: str = "",
        is_recurring: bool = False,
        recurring_type: Optional[str] = None,
        installments: int = 1,
        current_installment: int = 1,
        parent_transaction_id: Optional[str] = None,
        transfer_id: Optional[str] = None,
    ) -> str:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: str, user_id: str) -> Optional[Transaction]:
        """Get a live transaction owned by the user."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        account_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List live transactions ordered by due date, then creation order.

        Always returns a list, empty when nothing matches.
        """
        pass

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> None:
        """Replace every mutable field of a stored transaction."""
        pass

    @abstractmethod
    def update_transaction_partial(self, transaction_id: str, user_id: str, updates: dict[str, Any]) -> None:
        """Apply a subset of MUTABLE_TRANSACTION_FIELDS and stamp updated_at."""
        pass

    @abstractmethod
    def soft_delete_transaction(self, transaction_id: str, user_id: str) -> None:
        """Mark a transaction as deleted."""
        pass

    @abstractmethod
    def list_transactions_by_transfer_id(self, transfer_id: str, user_id: str) -> list[Transaction]:
        """List live transactions sharing a transfer ID."""
        pass

    @abstractmethod
    def soft_delete_transactions_by_transfer_id(self, transfer_id: str, user_id: str) -> int:
        """Mark every live transaction sharing a transfer ID as deleted. Returns count."""
        pass

    @abstractmethod
    def has_transactions_by_category(self, category_id: str, user_id: str) -> bool:
        """Check if any live transaction references the category."""
        pass
