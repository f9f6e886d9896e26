"""Account domain service."""

import logging
from datetime import date
from decimal import Decimal

from myfinance.database.base import Database
from myfinance.domain.entities import (
    Account,
    ACCOUNT_TYPES,
    EXPENSE,
    INCOME,
    OPENING_BALANCE_DESCRIPTION,
    Transaction,
)
from myfinance.domain.errors import (
    DefaultCategoryMissingError,
    DependencyError,
    DomainError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    default_category_missing,
    transaction_not_found,
)
from myfinance.domain.exchange import CurrencyConverter
from myfinance.domain.requests import CreateAccountRequest, UpdateAccountRequest
from myfinance.utils.amount_parser import to_minor_units

logger = logging.getLogger(__name__)

OPENING_BALANCE_CATEGORIES = {
    INCOME: ("Outras Receitas", INCOME),
    EXPENSE: ("Outros", EXPENSE),
}


def opening_balance_category(account_type: str) -> tuple[str, str]:
    """Return the (category name, transaction type) used for an opening balance."""
    if account_type == INCOME:
        return OPENING_BALANCE_CATEGORIES[INCOME]
    return OPENING_BALANCE_CATEGORIES[EXPENSE]


class AccountService:
    """Service for managing accounts and their opening balances."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_type(self, account_type: str) -> None:
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError(f"Invalid account type '{account_type}'")

    def _opening_amount(self, initial_value: Decimal) -> int:
        amount = to_minor_units(initial_value)
        if amount < 0:
            raise ValidationError("Initial value must not be negative")
        return amount

    def create_account(self, user_id: str, request: CreateAccountRequest) -> Account:
        """Create an account and seed its opening-balance transaction.

        A failure to create the opening balance (for instance when the
        default categories have not been seeded) is logged and the account
        is still returned.

        Args:
            user_id: Owner of the account
            request: Account fields, opening dates and initial value

        Returns:
            The created account

        Raises:
            ValidationError: If the name, currency, type or initial value is invalid
        """
        name = (request.name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        currency = CurrencyConverter.validate_currency(request.currency)
        self._validate_type(request.type)
        amount = self._opening_amount(request.initial_value)

        account_id = self.db.create_account(
            user_id=user_id,
            name=name,
            currency=currency,
            account_type=request.type,
            color=request.color,
            is_active=request.is_active,
        )
        account = self.get_account(account_id, user_id)

        try:
            self._create_opening_balance(account, amount, request.due_date, request.competence_date)
        except DomainError as e:
            logger.warning("Opening balance not created for account %s: %s", account_id, e)

        return account

    def _create_opening_balance(
        self,
        account: Account,
        amount: int,
        due_date: date,
        competence_date: date,
    ) -> Transaction:
        category_name, transaction_type = opening_balance_category(account.type)
        category = self.db.get_category_by_name(category_name, transaction_type, account.user_id)
        if category is None:
            raise DefaultCategoryMissingError(default_category_missing(category_name, transaction_type))

        transaction_id = self.db.create_transaction(
            user_id=account.user_id,
            description=OPENING_BALANCE_DESCRIPTION,
            amount=amount,
            transaction_type=transaction_type,
            category_id=category.id,
            account_id=account.id,
            due_date=due_date,
            competence_date=competence_date,
            is_paid=True,
            installments=1,
            current_installment=1,
        )
        logger.info("Created opening balance %s for account %s", transaction_id, account.id)
        transaction = self.db.get_transaction(transaction_id, account.user_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return transaction

    def get_account(self, account_id: str, user_id: str) -> Account:
        """Get an account owned by the user.

        Raises:
            NotFoundError: If it does not exist for the user
        """
        account = self.db.get_account(account_id, user_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, user_id: str) -> list[Account]:
        return self.db.list_accounts(user_id)

    def get_opening_balance(self, account_id: str, user_id: str) -> Transaction | None:
        self.get_account(account_id, user_id)
        return self.db.get_opening_balance_transaction(account_id, user_id)

    def update_account(self, account_id: str, user_id: str, request: UpdateAccountRequest) -> Account:
        """Update an account and, when both dates are given, its opening balance.

        The existing opening-balance transaction has its dates and amount
        replaced; if there is none, one is created. Unlike on creation, a
        missing default category is an error here.

        Raises:
            NotFoundError: If the account does not exist for the user
            ValidationError: If a supplied field is invalid
            DefaultCategoryMissingError: If a new opening balance has no category
        """
        account = self.get_account(account_id, user_id)

        name = None
        if request.name is not None:
            name = request.name.strip()
            if not name:
                raise ValidationError("Account name is required")
        currency = None
        if request.currency is not None:
            currency = CurrencyConverter.validate_currency(request.currency)
        if request.type is not None:
            self._validate_type(request.type)

        with_balance = request.due_date is not None and request.competence_date is not None
        amount = self._opening_amount(request.initial_value) if with_balance else 0

        with self.db.unit_of_work():
            self.db.update_account(
                account_id,
                user_id,
                name=name,
                currency=currency,
                color=request.color,
                account_type=request.type,
                is_active=request.is_active,
            )
            if with_balance:
                existing = self.db.get_opening_balance_transaction(account_id, user_id)
                if existing is not None:
                    self.db.update_transaction_partial(
                        existing.id,
                        user_id,
                        {
                            "due_date": request.due_date,
                            "competence_date": request.competence_date,
                            "amount": amount,
                        },
                    )
                else:
                    updated = self.get_account(account_id, user_id)
                    self._create_opening_balance(updated, amount, request.due_date, request.competence_date)

        return self.get_account(account.id, user_id)

    def delete_account(self, account_id: str, user_id: str) -> None:
        """Soft delete an account.

        Raises:
            NotFoundError: If the account does not exist for the user
            DependencyError: If live transactions still reference it
        """
        account = self.get_account(account_id, user_id)
        if self.db.has_transactions_by_account(account_id, user_id):
            raise DependencyError(account_delete_blocked(account.name))
        self.db.soft_delete_account(account_id, user_id)
