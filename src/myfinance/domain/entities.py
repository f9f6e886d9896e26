"""Domain model entities for myfinance.

These are pure data classes representing business concepts, independent of
database schema. Monetary amounts are integers in minor currency units
(cents); the sign of a transaction lives in its type, never in its amount.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"

ACCOUNT_TYPES = (INCOME, EXPENSE)
CATEGORY_TYPES = (INCOME, EXPENSE, TRANSFER)
TRANSACTION_TYPES = (INCOME, EXPENSE)

OPENING_BALANCE_DESCRIPTION = "Saldo Inicial"
TRANSFER_CATEGORY_NAME = "Transferência"


@dataclass(frozen=True)
class User:
    """Application user; the tenancy key for every other entity."""

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """Bank account domain entity."""

    id: str
    user_id: str
    currency: str
    name: str
    color: str
    type: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


@dataclass(frozen=True)
class Category:
    """Category domain entity with a two-level hierarchy.

    A category with ``user_id`` of None is a system category shared by all
    users (e.g. the transfer category).
    """

    id: str
    user_id: Optional[str]
    name: str
    description: str
    type: str
    color: str
    icon: str
    parent_id: Optional[str]
    is_active: bool
    visible: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_system(self) -> bool:
        return self.user_id is None


@dataclass(frozen=True)
class CategoryWithSubcategories:
    """Root category together with its live direct children."""

    category: Category
    subcategories: list[Category] = field(default_factory=list)


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: str
    user_id: str
    description: str
    amount: int
    type: str
    category_id: str
    account_id: str
    due_date: date
    competence_date: date
    is_paid: bool
    observation: str
    is_recurring: bool
    recurring_type: Optional[str]
    installments: int
    current_installment: int
    parent_transaction_id: Optional[str]
    transfer_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExchangeInfo:
    """Conversion metadata attached to a cross-currency transfer."""

    from_currency: str
    to_currency: str
    exchange_rate: float
    original_amount: int
    converted_amount: int


@dataclass(frozen=True)
class TransferResult:
    """The linked pair produced by a transfer."""

    debit: Transaction
    credit: Transaction
    transfer_id: str
    exchange_info: Optional[ExchangeInfo] = None
